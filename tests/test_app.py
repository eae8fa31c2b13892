"""TUI behaviour driven through Textual's pilot."""

from __future__ import annotations

from textual.widgets import Button, Input, Label

from conftest import json_response

from automation.citation_extractor.app import CitationApp
from automation.citation_extractor.config import Settings
from automation.citation_extractor.extractor import SessionState
from automation.citation_extractor.models import CitationStyle, InputKind


def _settings(tmp_path) -> Settings:
    return Settings(
        library_path=tmp_path / "lib" / "citations.json",
        export_dir=tmp_path / "exports",
    )


async def _submit(app: CitationApp, pilot, raw: str) -> None:
    app.query_one("#citation-input", Input).value = raw
    await pilot.press("enter")
    await app.workers.wait_for_complete()
    await pilot.pause()


async def test_initial_state_disables_citation_actions(make_client, tmp_path) -> None:
    client, _ = make_client({})
    async with client:
        app = CitationApp(settings=_settings(tmp_path), client=client)
        async with app.run_test(size=(120, 50)) as pilot:
            await pilot.pause()
            assert app.session.state is SessionState.IDLE
            for btn_id in ("#btn-copy", "#btn-share", "#btn-save"):
                assert app.query_one(btn_id, Button).disabled
            assert app.query_one("#style-apa", Button).has_class("-selected")


async def test_blank_submit_does_nothing(make_client, tmp_path) -> None:
    client, router = make_client({})
    async with client:
        app = CitationApp(settings=_settings(tmp_path), client=client)
        async with app.run_test(size=(120, 50)) as pilot:
            await _submit(app, pilot, "   ")
            assert app.session.state is SessionState.IDLE
    assert router.requests == []


async def test_extract_then_cycle_style(make_client, crossref_work, tmp_path) -> None:
    client, router = make_client({"api.crossref.org": json_response(crossref_work)})
    async with client:
        app = CitationApp(settings=_settings(tmp_path), client=client)
        async with app.run_test(size=(120, 50)) as pilot:
            await _submit(app, pilot, "doi:10.1038/nature12373")

            assert app.session.state is SessionState.DONE
            assert app.session.detected.kind is InputKind.DOI
            assert not app.query_one("#btn-copy", Button).disabled

            await pilot.press("f6")
            await pilot.pause()
            assert app.session.style is CitationStyle.MLA
            assert app.query_one("#style-mla", Button).has_class("-selected")
            assert not app.query_one("#style-apa", Button).has_class("-selected")
            assert len(router.requests) == 1


async def test_failed_lookup_keeps_input(make_client, tmp_path) -> None:
    client, _ = make_client({"openlibrary.org": json_response({})})
    async with client:
        app = CitationApp(settings=_settings(tmp_path), client=client)
        async with app.run_test(size=(120, 50)) as pilot:
            await _submit(app, pilot, "978-0-321-12521-7")

            assert app.session.state is SessionState.FAILED
            assert app.session.error == "ISBN not found"
            assert app.query_one("#citation-input", Input).value == "978-0-321-12521-7"
            assert app.query_one("#btn-save", Button).disabled


async def test_save_share_and_reset(make_client, tmp_path, monkeypatch) -> None:
    copied: list[str] = []
    monkeypatch.setattr(
        "automation.citation_extractor.actions.pyperclip.copy", copied.append,
    )
    settings = _settings(tmp_path)
    client, _ = make_client({})
    async with client:
        app = CitationApp(settings=settings, client=client)
        async with app.run_test(size=(120, 50)) as pilot:
            await _submit(app, pilot, "https://example.com/some-page-title")
            assert app.session.state is SessionState.DONE

            await pilot.press("f2")
            await pilot.press("f3")
            await pilot.press("f4")
            await pilot.pause()

            assert copied == [app.session.citation]
            assert (settings.export_dir / "some_page_title_apa.txt").exists()
            assert settings.library_path.exists()

            await pilot.press("f5")
            await pilot.pause()
            assert app.session.state is SessionState.IDLE
            assert app.query_one("#citation-input", Input).value == ""
            assert app.query_one("#btn-copy", Button).disabled


async def test_save_against_corrupt_library_notifies(make_client, tmp_path) -> None:
    settings = _settings(tmp_path)
    settings.library_path.parent.mkdir(parents=True)
    settings.library_path.write_text("{broken", encoding="utf-8")
    client, _ = make_client({})
    async with client:
        app = CitationApp(settings=settings, client=client)
        async with app.run_test(size=(120, 50)) as pilot:
            await _submit(app, pilot, "https://example.com/some-page-title")
            await pilot.press("f4")
            await pilot.pause()

            assert app.is_running
            assert app.session.state is SessionState.DONE
    assert settings.library_path.read_text(encoding="utf-8") == "{broken"


async def test_live_detection_continues_after_extraction(make_client, tmp_path) -> None:
    client, _ = make_client({})
    async with client:
        app = CitationApp(settings=_settings(tmp_path), client=client)
        async with app.run_test(size=(120, 50)) as pilot:
            await _submit(app, pilot, "https://example.com/some-page-title")
            assert app.session.state is SessionState.DONE

            app.query_one("#citation-input", Input).value = "https://youtu.be/dQw4w9WgXcQ"
            await pilot.pause()

            detected = str(app.query_one("#detected-label", Label).render())
            assert "YouTube Video" in detected
