"""Fixtures building a small literate book in a temporary directory."""

import json

import pytest

INDEX_MD = """# Tiny book {#home}

A two-chapter book with `py 2 + 3` sites.
"""

CHAPTER_MD = """# Ozone at two sites {#ozone}

```{python load}
import pandas as pd
ozone = pd.read_csv("data/ozone.csv")
print(len(ozone), "rows")
```

```python
# a static listing, never executed
raise RuntimeError("not run")
```

The mean is `py round(ozone["o3"].mean(), 1)` ppb.

```{python summary, echo=False}
ozone.groupby("site", as_index=False)["o3"].mean()
```

```{python ozone-plot, echo=False, fig_caption="Ozone by day"}
import matplotlib.pyplot as plt
fig, ax = plt.subplots()
ax.plot(ozone["day"], ozone["o3"])
ax
```

```{python hidden, include=False}
secret = 42
```
"""

OZONE_CSV = "site,day,o3\nA,1,30.0\nA,2,34.0\nB,1,40.0\nB,2,44.0\n"


def write_book(book_dir, chapters=None, **extra):
    """Write a book directory with ``index.md`` and ``01-ozone.md``."""
    book_dir.mkdir(parents=True, exist_ok=True)
    (book_dir / "data").mkdir(exist_ok=True)
    (book_dir / "data" / "ozone.csv").write_text(OZONE_CSV, encoding="utf-8")
    (book_dir / "index.md").write_text(INDEX_MD, encoding="utf-8")
    (book_dir / "01-ozone.md").write_text(CHAPTER_MD, encoding="utf-8")
    config = {
        "title": "Tiny Book",
        "author": "Test Author",
        "chapters": chapters if chapters is not None else ["index.md", "01-ozone.md"],
        "output_dir": "site",
    }
    config.update(extra)
    (book_dir / "book.json").write_text(json.dumps(config), encoding="utf-8")
    return book_dir


@pytest.fixture
def make_book():
    """Return the book writer so tests can vary chapters and settings."""
    return write_book


@pytest.fixture
def book_dir(tmp_path):
    """A small book with an index, one executable chapter and a data file."""
    return write_book(tmp_path / "book")
