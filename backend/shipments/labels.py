"""
Shipment label generator.
Uses PIL/Pillow and python-barcode to draw a Code128 barcode of the
shipment number with the routing details printed around it.
"""
import io
import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont
import barcode
from barcode.writer import ImageWriter

logger = logging.getLogger(__name__)


def _load_fonts():
    try:
        return (
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 18),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 14),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 12),
        )
    except (OSError, IOError):
        default = ImageFont.load_default()
        return default, default, default


def _draw_centered(draw, y, text, font, width):
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    draw.text(((width - text_width) // 2, y), text, fill='black', font=font)
    return bbox[3] - bbox[1]


def generate_shipment_label(
    shipment_number: str,
    recipient_name: str,
    governorate: Optional[str] = None,
    sender_name: Optional[str] = None,
    parcel_count: Optional[int] = None,
    width: int = 400,  # 4 inches at 100 DPI
    height: int = 240,
) -> bytes:
    """
    Render a shipment label and return it as PNG bytes.

    Layout, top to bottom: sender, barcode, shipment number, recipient with
    governorate, parcel count.
    """
    font_large, font_medium, font_small = _load_fonts()

    if len(recipient_name) > 30:
        recipient_name = recipient_name[:30] + '...'

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)
    margin = 10

    top_line = f"From: {sender_name[:25]}" if sender_name else shipment_number
    _draw_centered(draw, 8, top_line, font_medium, width)

    barcode_y = 30
    barcode_available_height = height - barcode_y - 80
    text_y = barcode_y

    try:
        code128 = barcode.get_barcode_class('code128')
        barcode_img = code128(shipment_number, writer=ImageWriter()).render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 20.0,
            'quiet_zone': 2.0,
            'font_size': 0,
            'text_distance': 0,
            'background': 'white',
            'foreground': 'black',
        })

        barcode_img_width, barcode_img_height = barcode_img.size
        barcode_width = width - (2 * margin)
        scale_factor = barcode_width / barcode_img_width
        scaled_height = int(barcode_img_height * scale_factor)
        if scaled_height > barcode_available_height:
            scale_factor = barcode_available_height / barcode_img_height
            scaled_height = barcode_available_height
            barcode_width = int(barcode_img_width * scale_factor)

        barcode_img = barcode_img.resize((barcode_width, scaled_height), Image.Resampling.BILINEAR)
        img.paste(barcode_img, ((width - barcode_width) // 2, barcode_y))
        text_y = barcode_y + scaled_height + 5
    except Exception as e:
        logger.error(f"Barcode generation failed for '{shipment_number}': {str(e)}", exc_info=True)
        text_y = barcode_y + 10

    text_y += _draw_centered(draw, text_y, shipment_number, font_large, width) + 8

    recipient_line = recipient_name
    if governorate:
        recipient_line += f" - {governorate}"
    text_y += _draw_centered(draw, text_y, recipient_line, font_medium, width) + 6

    if parcel_count:
        _draw_centered(draw, text_y, f"Parcels: {parcel_count}", font_small, width)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=True)
    return buffer.getvalue()
