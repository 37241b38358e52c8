# Configuration file for the Sphinx documentation builder.
#
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys

# autodoc imports the package from the source tree
sys.path.insert(0, os.path.abspath("../../src"))


# -- Project information -----------------------------------------------------

project = "events-to-async"
copyright = "2022, CSIRO"
author = "events-to-async developers"

# The full version, including alpha/beta/rc tags
release = "0.1.0"


# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.intersphinx",
    "sphinx_autodoc_typehints",
]

master_doc = "index"

# the Tango adapter is documented without pytango installed
autodoc_mock_imports = ["tango"]
autodoc_member_order = "bysource"
autodoc_default_options = {
    "members": True,
    "show-inheritance": True,
}

exclude_patterns = ["_build"]


# -- Options for HTML output -------------------------------------------------

html_theme = "ska_ser_sphinx_theme"

html_context = {}


intersphinx_mapping = {
    "python": ("https://docs.python.org/3.10", None),
    "tango": ("https://pytango.readthedocs.io/en/v9.4.2/", None),
}

nitpicky = True
nitpick_ignore = [
    ("py:class", "asyncio.events.AbstractEventLoop"),
    ("py:class", "events_to_async.iterator.EventRecord"),
]
