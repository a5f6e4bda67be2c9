"""FastAPI adapter exposing the sales dashboard core."""
