"""Stream request processing: ranking, episode matching and Stremio formatting."""
