"""
VariantGenerator - Decodes originals and renders resized variants.
"""

import io
import logging
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .config import Dimension
from .exceptions import ResizeError


class VariantGenerator:
    """
    Renders fixed-size variants from original images using Pillow.

    Variants are stretched to the exact target dimension; the source aspect
    ratio is not preserved.
    """

    FORMATS = {
        'jpg': 'JPEG',
        'png': 'PNG',
    }

    def __init__(
        self,
        quality: int = 85,
        resample: int = Image.Resampling.LANCZOS,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize variant generator.

        Args:
            quality: JPEG quality for output (default: 85)
            resample: Pillow resampling filter
            logger: Optional logger instance
        """
        self.quality = quality
        self.resample = resample
        self.logger = logger or logging.getLogger(__name__)

    def decode(self, image_data: bytes) -> Image.Image:
        """
        Decode image bytes.

        The image is fully loaded so that several threads can render
        variants from it at once.
        """
        try:
            img = Image.open(io.BytesIO(image_data))
            img.load()
        except (UnidentifiedImageError, Image.DecompressionBombError,
                OSError, SyntaxError, ValueError) as e:
            raise ResizeError(f"Could not decode image: {e}")

        self.logger.debug(f"Decoded {img.format} image {img.size[0]}x{img.size[1]} ({img.mode})")
        return img

    def render(self, img: Image.Image, dimension: Dimension, image_type: str) -> bytes:
        """
        Resize to the target dimension and encode.

        Args:
            img: Decoded original
            dimension: Target width and height
            image_type: 'jpg' or 'png', the output format

        Returns:
            Encoded variant bytes
        """
        output_format = self.FORMATS.get(image_type)
        if output_format is None:
            raise ResizeError(f"Cannot encode image type: {image_type}")

        try:
            resized = img.resize((dimension.width, dimension.height), self.resample)

            output = io.BytesIO()
            if output_format == 'JPEG':
                resized = self._convert_color_mode(resized)
                resized.save(output, format='JPEG', quality=self.quality, optimize=True)
            else:
                resized.save(output, format='PNG', optimize=True)
        except (OSError, ValueError) as e:
            raise ResizeError(f"Could not render {dimension} {image_type}: {e}")

        return output.getvalue()

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Flatten onto white so the image can be written as JPEG."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode not in ('RGB', 'L', 'CMYK'):
            return img.convert('RGB')
        return img
