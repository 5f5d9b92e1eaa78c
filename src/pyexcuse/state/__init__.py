"""State layer.

Each entity here owns one slice of the engine's in-memory state, mutates
it synchronously and hands the persisted form to the
:class:`~pyexcuse.state.writer.PersistenceWriter`.  Only the engine
composes them.
"""
