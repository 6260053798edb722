"""Tests for the key/value storage backend and the shared provider behavior."""

import base64
import io
import zipfile

import pytest

from goround.errors import NotFoundError, QuotaExceededError, UnsupportedFormatError
from goround.schemas.carousel_schema import Project
from goround.schemas.config import AppConfig, StorageConfig
from goround.schemas.export_schema import CarouselExport, ExportOptions, ExportPreset, SlideFile
from goround.schemas.font_schema import FontFormat
from goround.schemas.layout_schema import CustomLayout
from goround.storage import KeyValueStore, LocalStorageProvider, MemoryDownloadSink

SQUARE = ExportPreset(id="instagram_square", name="Instagram Square", width=1080, height=1080)


def make_project(name: str = "Demo", slides: int = 2) -> Project:
    project = Project(name=name)
    carousel = project.add_carousel("Launch")
    for index in range(slides):
        carousel.add_slide(title=f"Slide {index + 1}")
    return project


def make_provider(quota_bytes: int = 1024 * 1024, **config) -> LocalStorageProvider:
    return LocalStorageProvider(
        store=KeyValueStore(quota_bytes=quota_bytes),
        config=StorageConfig(quota_bytes=quota_bytes, **config),
        sink=MemoryDownloadSink(),
    )


class TestProjects:
    @pytest.mark.asyncio
    async def test_save_and_load(self):
        provider = make_provider()
        project = make_project()
        await provider.save_project(project)

        projects = await provider.get_all_projects()
        assert len(projects) == 1
        assert projects[0].id == project.id
        assert projects[0].slide_count == 2
        assert '"modifiedAt"' in provider.store.get_item("carousel_projects")

    @pytest.mark.asyncio
    async def test_save_replaces_by_id(self):
        provider = make_provider()
        project = make_project()
        await provider.save_project(project)
        project.name = "Renamed"
        await provider.save_project(project)

        projects = await provider.get_all_projects()
        assert [p.name for p in projects] == ["Renamed"]

    @pytest.mark.asyncio
    async def test_save_stamps_modified_at(self):
        provider = make_provider()
        project = make_project()
        project.modified_at = "2000-01-01T00:00:00.000Z"
        await provider.save_project(project)
        assert project.modified_at != "2000-01-01T00:00:00.000Z"

    @pytest.mark.asyncio
    async def test_delete_and_metadata(self):
        provider = make_provider()
        keep, drop = make_project("Keep", slides=3), make_project("Drop")
        await provider.save_project(keep)
        await provider.save_project(drop)
        await provider.delete_project(drop.id)

        metadata = await provider.get_project_metadata()
        assert [m.name for m in metadata] == ["Keep"]
        assert metadata[0].slide_count == 3
        assert metadata[0].carousel_count == 1

    @pytest.mark.asyncio
    async def test_get_missing_project(self):
        provider = make_provider()
        assert await provider.get_project("nope") is None
        with pytest.raises(NotFoundError):
            await provider.require_project("nope")

    @pytest.mark.asyncio
    async def test_create_and_rename(self):
        provider = make_provider()
        project = await provider.create_new_project("Fresh")
        assert project.id.startswith("project-")
        await provider.rename_project(project.id, "Renamed")
        assert (await provider.get_project(project.id)).name == "Renamed"

    @pytest.mark.asyncio
    async def test_corrupt_collection_reads_as_empty(self):
        provider = make_provider()
        provider.store.set_item("carousel_projects", "{not json")
        assert await provider.get_all_projects() == []


class TestDuplicate:
    @pytest.mark.asyncio
    async def test_duplicate_is_independent(self):
        provider = make_provider()
        source = make_project()
        await provider.save_project(source)

        copy = await provider.duplicate_project(source.id)
        assert copy.id != source.id
        assert copy.id.startswith(f"{source.id}-copy-")
        assert copy.name == "Demo (Copy)"
        assert copy.slide_count == source.slide_count

        copy.carousels[0].slides[0].title = "Changed"
        stored = await provider.get_project(source.id)
        assert stored.carousels[0].slides[0].title == "Slide 1"
        assert len(await provider.get_all_projects()) == 2

    @pytest.mark.asyncio
    async def test_duplicate_missing_project(self):
        provider = make_provider()
        with pytest.raises(NotFoundError) as exc_info:
            await provider.duplicate_project("missing")
        assert exc_info.value.entity_id == "missing"
        assert await provider.get_all_projects() == []


class TestQuotaEnforcement:
    @pytest.mark.asyncio
    async def test_oversized_save_leaves_store_unchanged(self):
        provider = make_provider(quota_bytes=4000)
        small = Project(name="Small")
        await provider.save_project(small)
        before = provider.store.get_item("carousel_projects")

        large = Project(name="Large", description="x" * 4000)
        with pytest.raises(QuotaExceededError) as exc_info:
            await provider.save_project(large)

        assert provider.store.get_item("carousel_projects") == before
        assert exc_info.value.total_size == 4000
        assert exc_info.value.attempted_size > 8000
        assert [p.name for p in await provider.get_all_projects()] == ["Small"]

    @pytest.mark.asyncio
    async def test_rejected_save_keeps_modified_at(self):
        provider = make_provider(quota_bytes=4000)
        large = Project(name="Large", description="x" * 4000)
        large.modified_at = "2000-01-01T00:00:00.000Z"

        with pytest.raises(QuotaExceededError):
            await provider.save_project(large)
        assert large.modified_at == "2000-01-01T00:00:00.000Z"

        large.description = None
        await provider.save_project(large)
        assert large.modified_at != "2000-01-01T00:00:00.000Z"
        assert (await provider.get_project(large.id)).modified_at == large.modified_at

    @pytest.mark.asyncio
    async def test_oversized_font_is_rejected(self):
        provider = make_provider(quota_bytes=2000)
        with pytest.raises(QuotaExceededError):
            await provider.upload_font("Huge.ttf", b"\x00" * 3000)
        assert await provider.get_all_custom_fonts() == []

    @pytest.mark.asyncio
    async def test_describe_usage(self):
        provider = make_provider(quota_bytes=2048)
        assert await provider.describe_usage() == "Current storage: 0 B / 2.00 KB"


class TestFonts:
    @pytest.mark.asyncio
    async def test_upload_font(self):
        provider = make_provider()
        font = await provider.upload_font("MyFont-Bold.otf", b"OTTO-data")

        assert font.format == FontFormat.OTF
        assert font.name == "MyFont-Bold"
        assert font.family == "MyFont Bold"
        assert font.id.startswith("font-")
        prefix = "data:font/otf;base64,"
        assert font.base64_data.startswith(prefix)
        assert base64.b64decode(font.base64_data[len(prefix):]) == b"OTTO-data"
        assert [f.id for f in await provider.get_all_custom_fonts()] == [font.id]

    @pytest.mark.asyncio
    async def test_upload_unsupported_format(self):
        provider = make_provider()
        with pytest.raises(UnsupportedFormatError) as exc_info:
            await provider.upload_font("notes.txt", b"hello")
        assert exc_info.value.extension == "txt"
        assert await provider.get_all_custom_fonts() == []

    @pytest.mark.asyncio
    async def test_large_font_logs_warning(self, caplog):
        provider = make_provider(large_font_warning_bytes=10)
        with caplog.at_level("WARNING"):
            await provider.upload_font("Wide.woff2", b"\x00" * 64)
        assert "Large font file detected" in caplog.text

    @pytest.mark.asyncio
    async def test_delete_font(self):
        provider = make_provider()
        font = await provider.upload_font("A.ttf", b"a")
        await provider.delete_custom_font(font.id)
        assert await provider.get_all_custom_fonts() == []

    @pytest.mark.asyncio
    async def test_font_settings_default_and_google_fonts(self):
        provider = make_provider()
        settings = await provider.get_font_settings()
        assert settings.heading_font == "AT-Kyrios Standard"

        await provider.add_google_font("Lobster")
        await provider.add_google_font("Lobster")
        await provider.add_google_font("Roboto")
        assert (await provider.get_font_settings()).google_fonts == ["Lobster", "Roboto"]

        await provider.remove_google_font("Lobster")
        assert (await provider.get_font_settings()).google_fonts == ["Roboto"]
        assert '"googleFonts"' in provider.store.get_item("font_settings")


class TestCustomLayouts:
    @pytest.mark.asyncio
    async def test_save_get_delete(self):
        provider = make_provider()
        layout = CustomLayout(name="Card", html_template="<div>{{title}}</div>")
        await provider.save_custom_layout(layout)
        assert (await provider.get_custom_layout(layout.id)).name == "Card"

        layout.name = "Card v2"
        await provider.save_custom_layout(layout)
        assert [l.name for l in await provider.get_all_custom_layouts()] == ["Card v2"]

        await provider.delete_custom_layout(layout.id)
        assert await provider.get_custom_layout(layout.id) is None


class TestRecentProjects:
    @pytest.mark.asyncio
    async def test_most_recent_first_without_duplicates(self):
        provider = make_provider()
        await provider.add_recent_project("/a", "A")
        await provider.add_recent_project("/b", "B")
        await provider.add_recent_project("/a", "A again")

        recent = await provider.get_recent_projects()
        assert [r.path for r in recent] == ["/a", "/b"]
        assert recent[0].name == "A again"

    @pytest.mark.asyncio
    async def test_bounded_to_limit(self):
        provider = make_provider()
        for index in range(12):
            await provider.add_recent_project(f"/p{index}", f"P{index}")

        recent = await provider.get_recent_projects()
        assert len(recent) == 10
        assert recent[0].path == "/p11"
        assert recent[-1].path == "/p2"

    @pytest.mark.asyncio
    async def test_clear(self):
        provider = make_provider()
        await provider.add_recent_project("/a", "A")
        await provider.clear_recent_projects()
        assert await provider.get_recent_projects() == []


class TestLocalExports:
    @pytest.mark.asyncio
    async def test_export_slide_downloads_document(self):
        provider = make_provider()
        project = make_project()
        slide = project.carousels[0].slides[1]
        options = ExportOptions(preset=SQUARE)

        result = await provider.export_slide(slide, "<svg/>", options)
        assert result.success
        assert result.file_path == "slide-2-instagram_square.svg"
        assert provider.sink.downloads["slide-2-instagram_square.svg"] == b"<svg/>"
        assert provider.sink.mime_types["slide-2-instagram_square.svg"] == "image/svg+xml"

    @pytest.mark.asyncio
    async def test_export_project_downloads_archive(self):
        provider = make_provider()
        project = make_project(name="My Demo")
        exports = [
            CarouselExport(
                name="Launch",
                slides=[
                    SlideFile(name="Launch-slide-001.svg", content="<svg>1</svg>"),
                    SlideFile(name="Launch-slide-002.svg", content="<svg>2</svg>"),
                ],
            )
        ]

        result = await provider.export_project_folder(project, exports)
        assert result.success
        assert result.file_path == "My-Demo.zip"

        archive = zipfile.ZipFile(io.BytesIO(provider.sink.downloads["My-Demo.zip"]))
        assert sorted(archive.namelist()) == [
            "My-Demo/Launch/Launch-slide-001.svg",
            "My-Demo/Launch/Launch-slide-002.svg",
        ]
        assert archive.read("My-Demo/Launch/Launch-slide-002.svg") == b"<svg>2</svg>"

    @pytest.mark.asyncio
    async def test_platform(self):
        provider = make_provider()
        assert await provider.is_desktop() is False
        assert (await provider.get_paths()).projects.startswith("kv://")
        result = await provider.import_figma_svg()
        assert not result.success


class TestStorageContext:
    def test_provider_is_memoized_and_reset(self):
        from goround.storage import StorageContext

        context = StorageContext(AppConfig())
        first = context.provider
        assert isinstance(first, LocalStorageProvider)
        assert context.provider is first
        assert not context.is_desktop

        context.reset()
        assert context.provider is not first

    def test_bridge_selects_filesystem_backend(self, tmp_path):
        from goround.storage import FileSystemProvider, LocalHostBridge, StorageContext

        context = StorageContext()
        context.initialize(bridge=LocalHostBridge(user_data=tmp_path))
        assert context.is_desktop
        assert isinstance(context.provider, FileSystemProvider)

    def test_quota_comes_from_config(self):
        from goround.storage import create_storage

        config = AppConfig(storage=StorageConfig(quota_bytes=1234))
        provider = create_storage(config)
        assert provider.store.quota_bytes == 1234


class TestDirectoryDownloadSink:
    @pytest.mark.asyncio
    async def test_downloads_land_in_directory(self, tmp_path):
        from goround.storage import DirectoryDownloadSink

        provider = LocalStorageProvider(store=KeyValueStore(), sink=DirectoryDownloadSink(tmp_path / "downloads"))
        slide = make_project().carousels[0].slides[0]
        result = await provider.export_slide(slide, "<svg/>", ExportOptions(preset=SQUARE))

        target = tmp_path / "downloads" / "slide-1-instagram_square.svg"
        assert result.file_path == str(target)
        assert target.read_text(encoding="utf-8") == "<svg/>"
