from manywest.cli import entrypoint

entrypoint()
