from pathlib import Path

# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Project information -----------------------------------------------------

project = 'AvocatAssist-Client'
copyright = '2025, AvocatAssist'
author = 'AvocatAssist'
release = 'v0.1'

# repo_root = docs/source/../../
REPO_ROOT = Path(__file__).resolve().parents[2]

# -- General configuration ---------------------------------------------------

extensions = [
    "autoapi.extension",
    "sphinx.ext.napoleon",        # Google/NumPy docstrings
    "sphinx.ext.viewcode",        # source links
    "sphinx.ext.intersphinx",
    "myst_parser",
]

source_suffix = {
    ".rst": "restructuredtext",
    ".md": "markdown",
}

myst_enable_extensions = [
    "colon_fence",
    "deflist",
]

templates_path = ['_templates']
exclude_patterns = []

language = 'en'

html_show_sourcelink = True

# ── AutoAPI (client library) ────────────────────────────────────────────────
autoapi_type = "python"
autoapi_dirs = [str(REPO_ROOT / "avocat_assist")]
autoapi_add_toctree_entry = True
add_module_names = False
autoapi_root = "api_reference"
autoapi_options = [
    "members",
    "undoc-members",
    "show-inheritance",
    "show-module-summary",
]
autoapi_member_order = "bysource"
autoapi_python_class_content = "class"
autoapi_ignore = [
    "*__pycache__*",
]

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "httpx": ("https://www.python-httpx.org", None),
}

# ---- Theme ----
html_theme = "sphinx_rtd_theme"
html_title = project

# Napoleon (NumPy docstrings)
napoleon_google_docstring = False
napoleon_numpy_docstring = True
