"""Live-status provider clients."""
