"""
Inkwell Images — flat, unversioned image store.

Physical storage: {images_root}/{image_name}
"""

from inkwell.images.models import Image
from inkwell.images.store import ImageStore

__all__ = ["Image", "ImageStore"]
