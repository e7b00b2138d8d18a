"""Entity risk screening against watchlist and threat-feed sources."""
