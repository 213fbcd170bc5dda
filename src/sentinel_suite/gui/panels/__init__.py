"""Editor windows."""
