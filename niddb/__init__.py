"""
niddb: NID (numeric import identifier) resolution for MIPS executable images.

Executables import functions and variables by 32-bit NIDs grouped under
library names. niddb loads NID databases in several encodings, merges them
into one in-memory index and turns (library, NID) pairs back into names:
- Load PSPLIBDOC XML, vita-style JSON and YAML import databases
- Resolve NIDs with master override, built-in syslib exports and fallback names
- Look up call signatures for resolved functions

Usage:
    from niddb.core.database import NidDatabase

    with NidDatabase() as db:
        db.load_file(Path("psplibdoc.xml"))
        name = db.resolve("sceCtrl", 0x6A2774F3)
"""

__version__ = "0.1.0"
