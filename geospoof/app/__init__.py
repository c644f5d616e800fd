"""Application layer: composition root, Tk bootstrap, and views."""
