"""Tests for the filesystem backend and the local host bridge."""

import base64
import json

import pytest

from goround.errors import IOFailureError
from goround.schemas.carousel_schema import Project
from goround.schemas.export_schema import ExportOptions, ExportPreset, OperationResult
from goround.schemas.layout_schema import CustomLayout
from goround.storage import FileSystemProvider, LocalHostBridge

SQUARE = ExportPreset(id="instagram_square", name="Instagram Square", width=1080, height=1080)

FIGMA_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="1080" height="1080">
  <rect id="Background" width="1080" height="1080" fill="#101010"/>
  <text id="Title" x="80" y="200" fill="#fafafa">Placeholder</text>
</svg>"""


def make_project(name: str = "Demo") -> Project:
    project = Project(name=name)
    carousel = project.add_carousel("Launch")
    carousel.add_slide(title="Hello", body_text="First slide")
    return project


def make_provider(tmp_path, **pickers) -> FileSystemProvider:
    bridge = LocalHostBridge(user_data=tmp_path / "data", documents=tmp_path / "docs", **pickers)
    return FileSystemProvider(bridge)


class FlakyReadBridge(LocalHostBridge):
    """Local bridge whose reads can be switched to fail, as on a locked file."""

    fail_reads = False

    async def read_file(self, path: str) -> OperationResult:
        if self.fail_reads:
            return OperationResult.fail("EACCES: resource temporarily unavailable")
        return await super().read_file(path)


class TestLocalHostBridge:
    @pytest.mark.asyncio
    async def test_write_creates_parents_and_reads_back(self, tmp_path):
        bridge = LocalHostBridge(user_data=tmp_path)
        path = str(tmp_path / "a" / "b" / "note.txt")

        assert (await bridge.write_file(path, "héllo")).success
        assert await bridge.exists(path)
        result = await bridge.read_file(path)
        assert result.success
        assert result.data == "héllo"

    @pytest.mark.asyncio
    async def test_binary_round_trip(self, tmp_path):
        bridge = LocalHostBridge(user_data=tmp_path)
        path = str(tmp_path / "blob.bin")
        payload = base64.b64encode(b"\x00\xff\x10").decode("ascii")

        assert (await bridge.write_binary_file(path, payload)).success
        assert (await bridge.read_binary_file(path)).data == payload

    @pytest.mark.asyncio
    async def test_missing_file_is_a_failure_not_an_exception(self, tmp_path):
        bridge = LocalHostBridge(user_data=tmp_path)
        result = await bridge.read_file(str(tmp_path / "missing.txt"))
        assert not result.success
        assert result.error
        assert not (await bridge.delete_file(str(tmp_path / "missing.txt"))).success

    @pytest.mark.asyncio
    async def test_read_dir_and_rmdir(self, tmp_path):
        bridge = LocalHostBridge(user_data=tmp_path)
        root = tmp_path / "tree"
        await bridge.mkdir(str(root / "sub"))
        await bridge.write_file(str(root / "file.txt"), "x")

        listing = (await bridge.read_dir(str(root))).data
        assert {"name": "file.txt", "isDirectory": False, "isFile": True} in listing
        assert {"name": "sub", "isDirectory": True, "isFile": False} in listing

        assert (await bridge.rmdir(str(root))).success
        assert not root.exists()
        assert (await bridge.rmdir(str(root))).success

    @pytest.mark.asyncio
    async def test_paths(self, tmp_path):
        bridge = LocalHostBridge(user_data=tmp_path / "data", documents=tmp_path / "docs")
        assert (await bridge.get_path("userData")).data == str(tmp_path / "data")
        assert (await bridge.get_path("documents")).data == str(tmp_path / "docs")
        assert not (await bridge.get_path("desktop")).success

    @pytest.mark.asyncio
    async def test_pickers_default_to_canceled(self, tmp_path):
        bridge = LocalHostBridge(user_data=tmp_path)
        assert await bridge.open_file_picker() is None
        assert await bridge.save_file_picker() is None
        assert await bridge.open_folder_picker() is None
        assert not (await bridge.open_path(str(tmp_path))).success

    @pytest.mark.asyncio
    async def test_async_picker(self, tmp_path):
        async def pick(title, filters, multiple):
            return [str(tmp_path / "one.svg")]

        bridge = LocalHostBridge(user_data=tmp_path, file_picker=pick)
        assert await bridge.open_file_picker(multiple=True) == [str(tmp_path / "one.svg")]


class TestFileSystemProvider:
    @pytest.mark.asyncio
    async def test_projects_persist_as_camel_case_json(self, tmp_path):
        provider = make_provider(tmp_path)
        project = make_project()
        await provider.save_project(project)

        data = json.loads((tmp_path / "data" / "projects.json").read_text(encoding="utf-8"))
        assert data[0]["id"] == project.id
        assert "createdAt" in data[0]
        assert "modifiedAt" in data[0]
        assert "description" not in data[0]

        reopened = make_provider(tmp_path)
        projects = await reopened.get_all_projects()
        assert projects[0].carousels[0].slides[0].title == "Hello"

    @pytest.mark.asyncio
    async def test_missing_and_corrupt_collections_read_as_empty(self, tmp_path):
        provider = make_provider(tmp_path)
        assert await provider.get_all_projects() == []

        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "layouts.json").write_text("[{broken", encoding="utf-8")
        assert await provider.get_all_custom_layouts() == []

    @pytest.mark.asyncio
    async def test_failed_write_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        provider = FileSystemProvider(LocalHostBridge(user_data=blocker / "data"))

        with pytest.raises(IOFailureError) as exc_info:
            await provider.save_project(make_project())
        assert "projects.json" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_failed_write_keeps_modified_at(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        provider = FileSystemProvider(LocalHostBridge(user_data=blocker / "data"))
        project = make_project()
        project.modified_at = "2000-01-01T00:00:00.000Z"

        with pytest.raises(IOFailureError):
            await provider.save_project(project)
        assert project.modified_at == "2000-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_fonts_settings_and_recent(self, tmp_path):
        provider = make_provider(tmp_path)
        font = await provider.upload_font("Brand_Sans.woff", b"wOFF")
        await provider.add_google_font("Lobster")
        await provider.add_recent_project("/projects/demo", "Demo")

        assert font.family == "Brand Sans"
        assert [f.id for f in await provider.get_all_custom_fonts()] == [font.id]
        assert (await provider.get_font_settings()).google_fonts == ["Lobster"]
        assert (tmp_path / "data" / "fonts.json").exists()
        assert (tmp_path / "data" / "font-settings.json").exists()
        assert [r.path for r in await provider.get_recent_projects()] == ["/projects/demo"]

    @pytest.mark.asyncio
    async def test_paths(self, tmp_path):
        provider = make_provider(tmp_path)
        assert await provider.is_desktop()
        paths = await provider.get_paths()
        assert paths.projects == str(tmp_path / "data" / "projects")
        assert paths.documents == str(tmp_path / "docs")


class TestFailedReads:
    @staticmethod
    def make_flaky(tmp_path):
        bridge = FlakyReadBridge(user_data=tmp_path / "data")
        return bridge, FileSystemProvider(bridge)

    @pytest.mark.asyncio
    async def test_save_after_failed_read_keeps_existing_projects(self, tmp_path):
        bridge, provider = self.make_flaky(tmp_path)
        for name in ("A", "B", "C"):
            await provider.save_project(Project(name=name))
        before = (tmp_path / "data" / "projects.json").read_text(encoding="utf-8")

        bridge.fail_reads = True
        with pytest.raises(IOFailureError) as exc_info:
            await provider.save_project(Project(name="D"))
        assert "projects.json" in exc_info.value.message
        assert "EACCES" in exc_info.value.message
        assert (tmp_path / "data" / "projects.json").read_text(encoding="utf-8") == before

        bridge.fail_reads = False
        await provider.save_project(Project(name="D"))
        assert [p.name for p in await provider.get_all_projects()] == ["A", "B", "C", "D"]

    @pytest.mark.asyncio
    async def test_listing_falls_back_to_empty(self, tmp_path, caplog):
        bridge, provider = self.make_flaky(tmp_path)
        await provider.save_project(Project(name="A"))

        bridge.fail_reads = True
        with caplog.at_level("ERROR"):
            assert await provider.get_all_projects() == []
        assert "Failed to read projects.json" in caplog.text

    @pytest.mark.asyncio
    async def test_deletes_and_other_collections_abort(self, tmp_path):
        bridge, provider = self.make_flaky(tmp_path)
        project = Project(name="A")
        await provider.save_project(project)
        layout = CustomLayout(name="Mine", html_template="<p>{{title}}</p>")
        await provider.save_custom_layout(layout)
        await provider.upload_font("Brand.woff", b"wOFF")
        await provider.add_google_font("Lobster")
        await provider.add_recent_project("/projects/a", "A")

        bridge.fail_reads = True
        with pytest.raises(IOFailureError):
            await provider.delete_project(project.id)
        with pytest.raises(IOFailureError):
            await provider.save_custom_layout(CustomLayout(name="Other", html_template="<p/>"))
        with pytest.raises(IOFailureError):
            await provider.upload_font("Other.ttf", b"\x00\x01\x00\x00")
        with pytest.raises(IOFailureError):
            await provider.add_google_font("Roboto")
        with pytest.raises(IOFailureError):
            await provider.add_recent_project("/projects/b", "B")

        bridge.fail_reads = False
        assert [p.id for p in await provider.get_all_projects()] == [project.id]
        assert [l.id for l in await provider.get_all_custom_layouts()] == [layout.id]
        assert len(await provider.get_all_custom_fonts()) == 1
        assert (await provider.get_font_settings()).google_fonts == ["Lobster"]
        assert [r.path for r in await provider.get_recent_projects()] == ["/projects/a"]

    @pytest.mark.asyncio
    async def test_corrupt_file_is_not_overwritten(self, tmp_path):
        provider = make_provider(tmp_path)
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "projects.json").write_text("[{broken", encoding="utf-8")

        with pytest.raises(IOFailureError):
            await provider.save_project(Project(name="A"))
        assert (tmp_path / "data" / "projects.json").read_text(encoding="utf-8") == "[{broken"


class TestFileSystemExports:
    @pytest.mark.asyncio
    async def test_export_project_writes_folder_tree(self, tmp_path):
        from goround.pipelines import ExportPipeline
        from goround.svg_engine.codec import decode

        provider = make_provider(tmp_path)
        project = Project(name="Demo")
        carousel = project.add_carousel("Launch")
        carousel.add_slide(title="Go Live", layout_type="header_body")
        result = await ExportPipeline(provider).export_project(project, export_root=str(tmp_path / "out"))

        assert result.success
        assert result.file_path == str(tmp_path / "out" / "Demo")
        target = tmp_path / "out" / "Demo" / "Launch" / "Launch-slide-001.svg"
        assert target.exists()
        decoded = decode(target.read_text(encoding="utf-8"))
        assert decoded.layout_type == "header_body"
        assert decoded.carousel_id == carousel.id
        assert decoded.slide_number == 1
        assert decoded.title == "Go Live"

    @pytest.mark.asyncio
    async def test_export_project_canceled(self, tmp_path):
        from goround.pipelines import ExportPipeline

        provider = make_provider(tmp_path)
        result = await ExportPipeline(provider).export_project(make_project())
        assert not result.success
        assert result.canceled
        assert result.error is None

    @pytest.mark.asyncio
    async def test_export_project_with_picker_and_open(self, tmp_path):
        from goround.pipelines import ExportPipeline

        opened = []
        provider = make_provider(
            tmp_path,
            folder_picker=lambda title: str(tmp_path / "picked"),
            opener=opened.append,
        )
        result = await ExportPipeline(provider).export_project(make_project(), open_after_export=True)
        assert result.success
        assert opened == [str(tmp_path / "picked" / "Demo")]

    @pytest.mark.asyncio
    async def test_export_slide_uses_save_picker(self, tmp_path):
        provider = make_provider(
            tmp_path,
            save_picker=lambda title, default_name, filters: str(tmp_path / "out" / default_name),
        )
        slide = make_project().carousels[0].slides[0]
        result = await provider.export_slide(slide, "<svg/>", ExportOptions(preset=SQUARE))

        assert result.success
        assert result.file_path == str(tmp_path / "out" / "slide-1-instagram_square.svg")
        assert (tmp_path / "out" / "slide-1-instagram_square.svg").read_text(encoding="utf-8") == "<svg/>"

    @pytest.mark.asyncio
    async def test_export_slide_canceled(self, tmp_path):
        provider = make_provider(tmp_path)
        slide = make_project().carousels[0].slides[0]
        result = await provider.export_slide(slide, "<svg/>", ExportOptions(preset=SQUARE))
        assert result.canceled
        assert not result.success


class TestFigmaImport:
    @pytest.mark.asyncio
    async def test_import_picked_documents(self, tmp_path):
        good = tmp_path / "Hero.svg"
        good.write_text(FIGMA_SVG, encoding="utf-8")
        missing = tmp_path / "Gone.svg"
        provider = make_provider(tmp_path, file_picker=lambda title, filters, multiple: [str(good), str(missing)])

        result = await provider.import_figma_svg()
        assert result.success
        assert [t.name for t in result.templates] == ["Hero"]
        assert result.template.is_from_figma
        assert [f.name for f in result.failures] == ["Gone"]

    @pytest.mark.asyncio
    async def test_import_canceled(self, tmp_path):
        provider = make_provider(tmp_path)
        result = await provider.import_figma_svg()
        assert result.canceled
        assert not result.success
