import unittest
from unittest.mock import Mock, call

from hamcrest import assert_that, empty, is_

from blebridge.support.events import EventSource


class EventSourceTest(unittest.TestCase):

    def setUp(self):
        self.sut = EventSource()

    def test_no_listeners(self):
        assert_that(self.sut.listeners, is_(empty()))
        self.sut.fire(1)

    def test_add_and_remove(self):
        listener = Mock()
        self.sut += listener
        assert_that(self.sut.listeners, is_((listener,)))
        self.sut -= listener
        assert_that(self.sut.listeners, is_(empty()))
        self.sut.remove(listener)
        assert_that(self.sut.listeners, is_(empty()))

    def test_add_returns_the_source(self):
        assert_that(self.sut.add(Mock()), is_(self.sut))

    def test_listeners_called_in_order_with_the_arguments(self):
        manager = Mock()
        self.sut.add(manager.first).add(manager.second)
        self.sut.fire('connect', error=None)
        assert_that(manager.mock_calls, is_([call.first('connect', error=None), call.second('connect', error=None)]))

    def test_listener_removing_itself_while_firing(self):
        later = Mock()

        def once(event):
            self.sut.remove(once)

        self.sut += once
        self.sut += later
        self.sut.fire(1)
        self.sut.fire(2)
        assert_that(later.mock_calls, is_([call(1), call(2)]))
        assert_that(self.sut.listeners, is_((later,)))

    def test_listener_added_while_firing_sees_the_next_event(self):
        added = Mock()

        def adder(event):
            self.sut.remove(adder)
            self.sut.add(added)

        self.sut += adder
        self.sut.fire(1)
        added.assert_not_called()
        self.sut.fire(2)
        added.assert_called_once_with(2)

    def test_listener_exception_propagates(self):
        self.sut += Mock(side_effect=ValueError)
        self.assertRaises(ValueError, self.sut.fire, 1)


if __name__ == '__main__':  # pragma no cover
    unittest.main()
