"""bundlepack: unpack bundle manifests into immutable, content-addressed ConfigMaps."""

__version__ = "0.1.0"
