"""
Format Detector Tests
=====================
"""

from filmstrip.models.trace import ImageFormat, ScreenshotFrame
from filmstrip.trace.format_detector import detect_image_format, strip_data_uri, to_data_uri


class TestDetectImageFormat:
    """Tests for base64 payload sniffing."""
    
    def test_jpeg_magic_prefix(self):
        assert detect_image_format("/9j/AAAA") == ImageFormat.JPEG
    
    def test_png_magic_prefix(self):
        assert detect_image_format("iVBORAAAA") == ImageFormat.PNG
    
    def test_png_data_uri(self):
        assert detect_image_format("data:image/png;base64,XX") == ImageFormat.PNG
    
    def test_jpeg_and_jpg_data_uri(self):
        assert detect_image_format("data:image/jpeg;base64,XX") == ImageFormat.JPEG
        assert detect_image_format("data:image/jpg;base64,XX") == ImageFormat.JPEG
    
    def test_declared_subtype_wins_over_magic(self):
        assert detect_image_format("data:image/png;base64,/9j/AAAA") == ImageFormat.PNG
    
    def test_unknown_subtype_sniffs_payload(self):
        assert detect_image_format("data:image/webp;base64,iVBORAAAA") == ImageFormat.PNG
        assert detect_image_format("data:image/webp;base64,UklGR") == ImageFormat.JPEG
    
    def test_unknown_payload_defaults_to_jpeg(self):
        assert detect_image_format("R0lGODlh") == ImageFormat.JPEG
        assert detect_image_format("") == ImageFormat.JPEG
    
    def test_accepts_bytes(self):
        assert detect_image_format(b"iVBORw0KGgo") == ImageFormat.PNG


class TestDataUriHelpers:
    """Tests for data URI stripping and building."""
    
    def test_strip_data_uri(self):
        assert strip_data_uri("data:image/png;base64,iVBOR") == "iVBOR"
    
    def test_strip_keeps_raw_base64(self):
        assert strip_data_uri("/9j/AAAA") == "/9j/AAAA"
    
    def test_strip_without_comma_is_unchanged(self):
        assert strip_data_uri("data:image/png;base64") == "data:image/png;base64"
    
    def test_to_data_uri(self):
        png = ScreenshotFrame(timestamp=0, image_b64="iVBOR", format=ImageFormat.PNG)
        jpeg = ScreenshotFrame(timestamp=0, image_b64="/9j/", format=ImageFormat.JPEG)
        
        assert to_data_uri(png) == "data:image/png;base64,iVBOR"
        assert to_data_uri(jpeg) == "data:image/jpeg;base64,/9j/"
