class EventSource:
    """
    Calls each registered listener with the arguments given to fire(), in the order the listeners were added.
    Listeners added or removed while an event is being fired take part from the next event on.

    >>> source = EventSource()
    >>> source += print
    >>> source.fire('poweredOn')
    poweredOn
    """

    def __init__(self):
        self._listeners = []

    def add(self, listener):
        self._listeners.append(listener)
        return self

    def remove(self, listener):
        """ removes the listener. Removing a listener that was never added does nothing. """
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass
        return self

    __iadd__ = add
    __isub__ = remove

    @property
    def listeners(self) -> tuple:
        return tuple(self._listeners)

    def fire(self, *args, **kwargs):
        for listener in self.listeners:
            listener(*args, **kwargs)
