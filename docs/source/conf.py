# Sphinx configuration for the Orbidyn documentation.
# https://www.sphinx-doc.org/en/master/usage/configuration.html

import os
import sys
sys.path.insert(0, os.path.abspath('../../src'))

# -- Project information -----------------------------------------------------

project = 'Orbidyn'
copyright = '2026, Shane Billingsley'
author = 'Shane Billingsley'
release = '0.1.0'

# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',     # NumPy-style docstrings
    'sphinx.ext.autosummary',
    'sphinx.ext.mathjax',
    'sphinx.ext.viewcode',
    'myst_parser',             # DESIGN.md and other Markdown pages
]

autosummary_generate = True
autodoc_member_order = 'bysource'
napoleon_use_rtype = False
templates_path = ['_templates']
exclude_patterns = []

# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'
html_static_path = ['_static']
