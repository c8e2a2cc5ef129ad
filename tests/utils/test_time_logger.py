import porewell as pw


def test_decorated_function_is_transparent():
    @pw.time_logger(sections=["numerics"])
    def add(a, b=1):
        """Add two numbers."""
        return a + b

    assert add(2, b=3) == 5
    assert add.__name__ == "add"
    assert add.__doc__ == "Add two numbers."


def test_units():
    assert pw.BAR == 1e5
    assert pw.DAY == 86400
    assert abs(pw.MILLIDARCY - 9.869233e-16) < 1e-25
    assert abs(5 * pw.CENTI * pw.POISE - 5e-3) < 1e-15
