"""Starter .binfiddle.toml template."""

DEFAULT_TOML = """\
# binfiddle configuration
version = "1.0"

[diff]
format = "auto"           # auto | simple | unified | side-by-side | patch | summary
context = 3               # bytes of unchanged data shown around each hunk
width = 16                # bytes per hex-dump row
summary = false
# ignore_offsets = "0x0..0x10,0x100..0x200"

[output]
color = "auto"            # always | auto | never
silent = false

[patch]
# backup_suffix = ".orig"  # keep a copy of the target before patching
"""
