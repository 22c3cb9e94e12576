"""AWS-backed implementations of the tag store, OU lookup and schedule store."""
