"""Render the bundled textbook end to end."""

from py4envchem.config import BOOK_DIR, FIGURES_SUBDIR, NOJEKYLL_FILENAME
from py4envchem.pipeline.book_builder import load_book_config, render_book


def test_bundled_book_renders(tmp_path):
    """Test Bundled book renders every chapter with figures."""
    config = load_book_config(BOOK_DIR)
    out = tmp_path / "docs"
    result = render_book(BOOK_DIR, out, formats=["html"], dpi=40)
    assert result.rendered == [c.slug for c in config.chapters]
    for chapter in config.chapters:
        assert (out / chapter.output_name).is_file()
    assert (out / NOJEKYLL_FILENAME).exists()
    assert (out / "data" / "lake_metals.csv").is_file()
    figure_names = {p.name for p in (out / FIGURES_SUBDIR).iterdir()}
    assert any(name.startswith("05-") for name in figure_names)
    assert len(figure_names) >= 5
