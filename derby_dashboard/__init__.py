"""Race program engine behind the derby dashboard: horse registry, session lifecycle and animated playback."""
