import io

from PIL import Image

from receiptbot.ocr.preprocess import ImagePreprocessor


def test_wide_photo_is_downscaled_and_grayscaled(receipt_image_bytes):
    output = ImagePreprocessor(max_width=1200).process(receipt_image_bytes)

    with Image.open(io.BytesIO(output)) as image:
        assert image.format == "PNG"
        assert image.size == (1200, 600)
        assert image.mode == "L"


def test_small_photo_keeps_its_size():
    buffer = io.BytesIO()
    Image.new("RGB", (300, 500), color=(200, 10, 10)).save(buffer, format="JPEG")

    output = ImagePreprocessor().process(buffer.getvalue())

    with Image.open(io.BytesIO(output)) as image:
        assert image.size == (300, 500)


def test_undecodable_bytes_are_returned_unchanged():
    data = b"definitely not an image"
    assert ImagePreprocessor().process(data) is data
