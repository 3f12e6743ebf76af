from tkinter import TclError

import pytest

from ctiview import app, config
from ctiview.main import main


class _FakeApp:
    opened = []

    def open_path(self, path):
        self.opened.append(path)

    def mainloop(self):
        pass


def test_missing_display_exits_with_1(monkeypatch):
    def broken():
        raise TclError("no display name and no $DISPLAY environment variable")

    monkeypatch.setattr(app, "CtiViewerApp", broken)
    assert main([]) == 1


def test_bad_arguments_exit_with_2():
    with pytest.raises(SystemExit) as info:
        main(["--log-level", "NOPE"])
    assert info.value.code == 2


def test_opens_path_and_sets_strict_checksum(monkeypatch):
    _FakeApp.opened = []
    monkeypatch.setattr(app, "CtiViewerApp", _FakeApp)
    assert main(["--strict-checksum", "image.cti"]) == 0
    assert _FakeApp.opened == ["image.cti"]
    assert config.get_all()["strict_checksum"] is True
