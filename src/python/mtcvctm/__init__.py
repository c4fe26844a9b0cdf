"""mtcvctm - credential metadata from markdown.

Converts a markdown credential description (YAML front matter, a title,
a description paragraph and a claims list) into:
- SD-JWT VC Type Metadata (``vctm``)
- mso_mdoc credential configuration, ISO 18013-5 (``mddl``)
- W3C Verifiable Credential schema (``w3c``)

Usage:
    from mtcvctm.config import default_config
    from mtcvctm.converter import generate, parse_to_credential
    from mtcvctm.formats import default_registry
"""

__version__ = "0.1.0"
