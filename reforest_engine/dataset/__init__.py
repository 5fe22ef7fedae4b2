"""
Species reference dataset loading and in-process snapshot ownership.

Modules:
  loader   — CSV / JSON / Excel parsing into ``SpeciesRecord`` objects.
  provider — ``DatasetProvider`` holding the current immutable snapshot.
"""
