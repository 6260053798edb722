"""Tests for the export and import pipelines."""

import io
import zipfile

import pytest

from goround.pipelines import ExportPipeline, ImportPipeline, carousel_name_from_file
from goround.schemas.carousel_schema import Project
from goround.schemas.export_schema import ImportedFile
from goround.schemas.layout_schema import CustomLayout
from goround.storage import KeyValueStore, LocalStorageProvider, MemoryDownloadSink

FIGMA_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="1080" height="1080">
  <rect id="Background" width="1080" height="1080" fill="#101010"/>
  <text id="Title" x="80" y="200" fill="#fafafa">Placeholder</text>
</svg>"""


def make_provider() -> LocalStorageProvider:
    return LocalStorageProvider(store=KeyValueStore(), sink=MemoryDownloadSink())


def make_project() -> Project:
    project = Project(name="Demo")
    launch = project.add_carousel("Q3 Launch!")
    for title in ("One", "Two", "Three"):
        launch.add_slide(title=title, layout_type="bold_callout")
    tips = project.add_carousel("Tips")
    tips.add_slide(title="Only tip", quote="Ship it")
    return project


class TestCarouselNames:
    def test_name_from_exported_file(self):
        assert carousel_name_from_file("Launch-slide-001.svg") == "Launch"
        assert carousel_name_from_file("My-Deck-slide-012") == "My-Deck"

    def test_name_without_slide_marker(self):
        assert carousel_name_from_file("poster.svg") == "Imported"


class TestExportPipeline:
    @pytest.mark.asyncio
    async def test_build_carousel_exports(self):
        pipeline = ExportPipeline(make_provider())
        exports = await pipeline.build_carousel_exports(make_project())

        assert [e.name for e in exports] == ["Q3-Launch-", "Tips"]
        assert [s.name for s in exports[0].slides] == [
            "Q3-Launch--slide-001.svg",
            "Q3-Launch--slide-002.svg",
            "Q3-Launch--slide-003.svg",
        ]
        assert exports[1].slides[0].content.startswith("<svg")

    @pytest.mark.asyncio
    async def test_unknown_preset(self):
        from goround.errors import NotFoundError

        pipeline = ExportPipeline(make_provider())
        with pytest.raises(NotFoundError):
            await pipeline.build_carousel_exports(make_project(), "poster")

    @pytest.mark.asyncio
    async def test_render_uses_stored_custom_layout(self):
        provider = make_provider()
        layout = CustomLayout(name="Card", html_template="<div class='card'>{{title}}</div>")
        await provider.save_custom_layout(layout)

        project = Project(name="Custom")
        slide = project.add_carousel("Deck").add_slide(title="From storage", layout_type=layout.layout_type)
        content = await ExportPipeline(provider).render_slide(slide, "story")

        assert "From storage" in content
        assert 'viewBox="0 0 1080 1920"' in content

    @pytest.mark.asyncio
    async def test_export_slide_through_provider(self):
        provider = make_provider()
        slide = make_project().carousels[1].slides[0]
        result = await ExportPipeline(provider).export_slide(slide, "linkedin")

        assert result.success
        assert "slide-1-linkedin.svg" in provider.sink.downloads

    @pytest.mark.asyncio
    async def test_write_folder(self, tmp_path):
        pipeline = ExportPipeline(make_provider())
        project = make_project()
        exports = await pipeline.build_carousel_exports(project)

        written = pipeline.write_folder(project, exports, tmp_path)
        assert len(written) == 4
        assert (tmp_path / "Demo" / "Tips" / "Tips-slide-001.svg").exists()
        assert (tmp_path / "Demo" / "Q3-Launch-" / "Q3-Launch--slide-003.svg").exists()

    @pytest.mark.asyncio
    async def test_build_archive(self):
        pipeline = ExportPipeline(make_provider())
        project = make_project()
        archive = pipeline.build_archive(project, await pipeline.build_carousel_exports(project))

        names = zipfile.ZipFile(io.BytesIO(archive)).namelist()
        assert "Demo/Tips/Tips-slide-001.svg" in names
        assert len(names) == 4


class TestImportDocuments:
    def test_partial_failure_keeps_batch(self):
        result = ImportPipeline().import_documents([
            ImportedFile(name="Hero", content=FIGMA_SVG),
            ImportedFile(name="Broken", content="<svg"),
        ])
        assert result.success
        assert [t.name for t in result.templates] == ["Hero"]
        assert [f.name for f in result.failures] == ["Broken"]
        assert result.error is None

    def test_all_failed(self):
        result = ImportPipeline().import_documents([ImportedFile(name="Broken", content="nope")])
        assert not result.success
        assert result.error

    @pytest.mark.asyncio
    async def test_save_templates(self):
        provider = make_provider()
        pipeline = ImportPipeline(provider)
        result = pipeline.import_documents([ImportedFile(name="Hero", content=FIGMA_SVG)])

        assert await pipeline.save_templates(result.templates) == 1
        layouts = await provider.get_all_custom_layouts()
        assert [l.name for l in layouts] == ["Hero"]
        assert layouts[0].detected_colors["background_color"] == "#101010"

    @pytest.mark.asyncio
    async def test_save_templates_requires_storage(self):
        with pytest.raises(ValueError):
            await ImportPipeline().save_templates([])


class TestReconstructProject:
    @pytest.mark.asyncio
    async def test_rebuilds_carousels_in_order(self):
        original = make_project()
        exports = await ExportPipeline(make_provider()).build_carousel_exports(original)
        files = [
            ImportedFile(name=slide.name, content=slide.content)
            for carousel in exports
            for slide in carousel.slides
        ]
        files.reverse()
        files.append(ImportedFile(name="junk.svg", content='<svg xmlns="http://www.w3.org/2000/svg"/>'))

        project, failures = ImportPipeline().reconstruct_project("Restored", files)

        assert project.name == "Restored"
        assert [f.name for f in failures] == ["junk.svg"]
        by_id = {c.id: c for c in project.carousels}
        launch = by_id[original.carousels[0].id]
        assert launch.name == "Q3-Launch-"
        assert [s.title for s in launch.slides] == ["One", "Two", "Three"]
        assert [s.slide_number for s in launch.slides] == [1, 2, 3]
        assert all(s.layout_type == "bold_callout" for s in launch.slides)
        assert all(s.carousel_id == launch.id for s in launch.slides)

        tips = by_id[original.carousels[1].id]
        assert tips.slides[0].quote == "Ship it"
        assert project.slide_count == 4

    def test_groups_by_file_name_without_metadata(self):
        from goround.schemas.carousel_schema import Slide
        from goround.schemas.export_schema import ExportPreset
        from goround.schemas.font_schema import FontSettings
        from goround.svg_engine.codec import encode

        preset = ExportPreset(id="square", name="Square", width=1080, height=1080)

        def render(number: int, title: str) -> str:
            slide = Slide(carousel_id="c", slide_number=number, title=title)
            return encode(slide, preset, FontSettings(), include_metadata=False)

        files = [
            ImportedFile(name="Deck-slide-002.svg", content=render(2, "Second")),
            ImportedFile(name="Deck-slide-001.svg", content=render(1, "First")),
        ]
        project, failures = ImportPipeline().reconstruct_project("Plain", files)

        assert failures == []
        assert [c.name for c in project.carousels] == ["Deck"]
        assert [s.title for s in project.carousels[0].slides] == ["First", "Second"]
