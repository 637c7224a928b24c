"""companyfeed view layer — projection of snapshot events into render state.

Modules
-------
projection
    ``ViewModelProjector`` folds ``SnapshotEvent``s into a frozen
    ``CompanyListState`` (loading flag, error, records sorted by id).
renderer
    ``CompanyListRenderer`` turns ``CompanyListState`` into Rich renderables,
    including continuous ``Rich.Live`` mode.
"""
