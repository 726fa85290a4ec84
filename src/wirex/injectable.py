"""Lifecycle hooks for objects stored in an Injector."""


class Injectable:
    """Optional base class for services that want registration callbacks.

    Usage:
        class Database(Injectable):
            def on_init(self):
                self.conn = connect()

            def on_dispose(self):
                self.conn.close()

        injector.put(Database())   # on_init fires here
        injector.delete(Database)  # on_dispose fires here
    """

    def on_init(self) -> None:
        """Called once when the object is registered."""

    def on_dispose(self) -> None:
        """Called once when the object is removed from the injector."""
