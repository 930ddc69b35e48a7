"""
Tests for the epfi command line.
"""

import pytest
from PIL import Image

from epfi.cli import build_parser, main

from conftest import RED, png_bytes


@pytest.fixture
def image_path(tmp_path, two_by_two_rows):
    path = tmp_path / "source.png"
    path.write_bytes(png_bytes(two_by_two_rows))
    return path


class TestTextCommand:

    def test_hex_output(self, image_path, capsys):
        code = main(["text", str(image_path), "2", "-t", "0", "-m", "HEX"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == ["#00FF00", "#0000FF"]

    def test_rgb_is_default(self, image_path, capsys):
        main(["text", str(image_path), "1", "-t", "0"])
        # rarest-first: blue wins the tie with green on scan order
        assert capsys.readouterr().out.splitlines() == ["R: 000 | G: 000 | B: 255"]

    def test_lowercase_mode(self, image_path, capsys):
        main(["text", str(image_path), "1", "-t", "0", "-m", "hsv"])
        assert capsys.readouterr().out.strip() == "H: 000240 | S: 000001 | V: 000001"

    def test_missing_file(self, tmp_path, capsys):
        code = main(["text", str(tmp_path / "nope.png"), "2"])

        assert code == 1
        assert "does not exist" in capsys.readouterr().err

    def test_size_zero(self, image_path, capsys):
        code = main(["text", str(image_path), "0"])

        assert code == 1
        assert "size 0" in capsys.readouterr().err

    def test_transparent_image(self, tmp_path, capsys):
        path = tmp_path / "clear.png"
        path.write_bytes(png_bytes([[RED]], alpha=[[0]]))

        assert main(["text", str(path), "1"]) == 1
        assert "no opaque colors" in capsys.readouterr().err

    def test_strict_flag(self, image_path, capsys):
        assert main(["text", str(image_path), "4", "--strict"]) == 1
        assert "exceeds" in capsys.readouterr().err


class TestFileCommand:

    def test_writes_striped_png(self, image_path, tmp_path, capsys):
        out = tmp_path / "palette.png"
        code = main(["file", str(image_path), "2", "-t", "0",
                     "-o", str(out), "-w", "3", "-h", "2"])

        assert code == 0
        assert capsys.readouterr().out.strip() == str(out)
        image = Image.open(out).convert("RGB")
        assert image.size == (6, 2)
        assert image.getpixel((2, 0)) == (0, 255, 0)
        assert image.getpixel((3, 0)) == (0, 0, 255)

    def test_existing_output_gets_counter(self, image_path, tmp_path, capsys):
        out = tmp_path / "palette.png"
        args = ["file", str(image_path), "2", "-t", "0", "-o", str(out)]

        main(args)
        main(args)

        assert (tmp_path / "palette(1).png").exists()

    def test_default_swatch_dimensions(self):
        args = build_parser().parse_args(["file", "x.png", "3"])
        assert args.stripe_width == 50
        assert args.height == 100
        assert args.output == "output.png"

    def test_unwritable_output_directory(self, image_path, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")

        code = main(["file", str(image_path), "2", "-t", "0", "-o", str(blocker / "out.png")])

        assert code == 1
        assert "\033[31m" in capsys.readouterr().err

    def test_encoder_failure(self, image_path, tmp_path, capsys, monkeypatch):
        def broken_encoder(buffer):
            raise RuntimeError("Failed to encode image as PNG")

        monkeypatch.setattr("epfi.services.imaging.encode_png", broken_encoder)

        code = main(["file", str(image_path), "2", "-t", "0", "-o", str(tmp_path / "out.png")])

        assert code == 1
        assert "Failed to encode" in capsys.readouterr().err
