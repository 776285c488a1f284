import dicedestiny
import dicedestiny.__main__ as main_module


def test_module_entry_point_delegates(monkeypatch):
    called = []
    monkeypatch.setattr(main_module, "cli_main", lambda: called.append(True))
    main_module.main()
    assert called == [True]


def test_lazy_exports_resolve():
    assert dicedestiny.PuzzleSession.__name__ == "PuzzleSession"
    assert callable(dicedestiny.evaluate)
    assert isinstance(dicedestiny.__version__, str)
