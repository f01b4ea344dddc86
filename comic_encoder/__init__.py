"""Convert chapter directories of images to comic book volumes, and back."""

__version__ = "1.0.0"
