"""Tests for PNG preview generation and the command line."""

import pytest

from floorplan.__main__ import main
from floorplan.services.preview import generate_preview


PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


class TestGeneratePreview:

    def test_renders_drawing(self, sample_dxf, tmp_path):
        png = tmp_path / "previews" / "plan.png"
        floor = generate_preview(sample_dxf, png, 400, 300)

        assert floor is not None
        assert len(floor.rooms) == 1
        assert png.read_bytes().startswith(PNG_MAGIC)

    def test_hovered_room(self, sample_dxf, tmp_path):
        png = tmp_path / "hover.png"
        floor = generate_preview(sample_dxf, png, 400, 300, hovered_room_id="room-0")
        assert floor is not None
        assert png.exists()

    def test_missing_file_writes_placeholder(self, tmp_path):
        png = tmp_path / "missing.png"
        assert generate_preview(tmp_path / "nope.dxf", png) is None
        assert png.read_bytes().startswith(PNG_MAGIC)

    def test_unsupported_file_writes_placeholder(self, tmp_path):
        source = tmp_path / "plan.pdf"
        source.write_bytes(b"%PDF-1.7")
        png = tmp_path / "pdf.png"
        assert generate_preview(source, png) is None
        assert png.exists()


class TestCommandLine:

    def test_report_only(self, sample_dxf, capsys):
        assert main([str(sample_dxf)]) == 0
        out = capsys.readouterr().out
        assert "rooms: 1, walls: 4, doors: 1, windows: 1" in out
        assert "room-0" in out
        assert "Living 1" in out

    def test_writes_preview(self, sample_dxf, tmp_path, capsys):
        png = tmp_path / "cli.png"
        assert main([str(sample_dxf), str(png), "--width", "320", "--height", "240"]) == 0
        assert png.read_bytes().startswith(PNG_MAGIC)

    def test_polygonize_detector(self, sample_dxf, capsys):
        assert main([str(sample_dxf), "--detector", "polygonize"]) == 0
        assert "rooms: 1" in capsys.readouterr().out

    def test_missing_input(self, tmp_path):
        assert main([str(tmp_path / "nope.dxf")]) == 1

    def test_unsupported_input(self, tmp_path):
        source = tmp_path / "plan.pdf"
        source.write_bytes(b"%PDF-1.7")
        assert main([str(source)]) == 1

    def test_invalid_log_level_rejected(self, sample_dxf):
        with pytest.raises(SystemExit) as exc_info:
            main([str(sample_dxf), "--log-level", "verbose"])
        assert exc_info.value.code == 2

    def test_log_level_is_case_insensitive(self, sample_dxf, capsys):
        assert main([str(sample_dxf), "--log-level", "debug"]) == 0

    def test_invalid_log_level_from_environment(self, sample_dxf, monkeypatch):
        monkeypatch.setenv("FLOORPLAN_LOG_LEVEL", "verbose")
        with pytest.raises(SystemExit):
            main([str(sample_dxf)])
