"""HTML parsing into structured page facts."""
