"""Console front-end for the node engine."""
