import pathlib


CONFIG = {
    'env': 'dev',
    'data_path': pathlib.Path(),
    'commands': {
        'modules': [
            'perfdb.commands',
            'perfdb.reports',
            'perfdb.db',
            'perfdb.parts',
        ],
    },
    'components': {
        'core': {
            'context': 'perfdb.components:Context',
            'config': 'perfdb.components:Config',
            'accessor': 'perfdb.db.disk:DiskDatabaseAccessor',
        },
        'parts': {
            'tree': 'perfdb.parts.tree.components:DiskTree',
            'views': 'perfdb.parts.views.components:DiskViews',
            'filters': 'perfdb.parts.filters.components:DiskFilters',
        },
    },
    'parts': {
        'tree': {
            'dirname': 'performance_history_tree',
            # Number of most recent values used to calculate average and
            # standard deviation of a measurement.
            'rolling_range': 30,
            # Units used when a report element does not specify any.
            'default_units': '',
        },
        'views': {
            'dirname': 'performance_views',
        },
        'filters': {
            'dirname': 'performance_history_filters',
        },
    },
}
