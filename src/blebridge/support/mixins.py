"""
Mixins for value objects: classes whose instances are defined by their attributes.
"""


class StringerMixin:
    """
    Renders the class name and the attributes in name order.

    >>> class Point(StringerMixin):
    ...     def __init__(self):
    ...         self.y, self.x = 2, 'a'
    >>> str(Point())
    "Point(x='a', y=2)"
    """

    def __str__(self):
        fields = ', '.join('%s=%r' % item for item in sorted(vars(self).items()))
        return '%s(%s)' % (type(self).__name__, fields)


class CommonEqualityMixin:
    """ Instances are equal when they are of the same class and have equal attributes. """

    def __eq__(self, other):
        return type(other) is type(self) and vars(self) == vars(other)

    def __ne__(self, other):
        return not self == other
