"""HTTP surface for the pine tree scene."""
