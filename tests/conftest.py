pytest_plugins = ['perfdb.testing.pytest']
