"""
ign-heightmap: Gridded elevation maps from the IGN altimetry API

Builds a regular lon/lat grid around a center point, queries the IGN
elevation service in batches, and stores the result as an HDF5 dataset
with an optional grayscale rendering.
"""
