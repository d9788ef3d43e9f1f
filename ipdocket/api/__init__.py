"""Operations HTTP API for ipdocket."""
