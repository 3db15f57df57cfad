"""Common literal values used across newt_wiki.

These constants keep storage keys, limits, and the suggested topic pool in one
place so the navigation layer, the renderer, and tests import the same values
without drifting. Intended for internal use within the newt_wiki package.

Examples
--------
>>> from newt_wiki import _constants
>>> _constants.HISTORY_STORAGE_KEY
'aiwiki:history'
>>> _constants.HISTORY_LIMIT
8
"""

HISTORY_STORAGE_KEY = "aiwiki:history"
HISTORY_LIMIT = 8
HOST_HISTORY_LIMIT = 50
WIKI_SECTION_NAME = "NewtWiki"
LEAD_EXCERPT_LIMIT = 260
SUGGESTION_LIMIT = 6
VISIT_PATH_PREFIX = "/visit/"

SUGGESTED_TOPICS: tuple[str, ...] = (
    "Quantum Computing",
    "Photosynthesis",
    "The Renaissance",
    "Blockchain",
    "Black Holes",
    "CRISPR",
    "Game Theory",
    "Machine Learning",
    "Climate Change",
    "French Revolution",
    "Neural Networks",
    "Graph Theory",
    "Microplastics",
    "RNA Vaccines",
    "Higgs Boson",
    "Hogwarts",
)
