"""Frame selection, resolution planning and parallel frame processing."""
