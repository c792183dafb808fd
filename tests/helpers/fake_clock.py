class FakeClock:
    """
    Manually driven clock, callable like utc_now_ns().
    """
    def __init__(self, start_ns: int = 0):
        self.now = start_ns
        self.calls = 0

    def __call__(self) -> int:
        self.calls += 1
        return self.now

    def set(self, ns: int) -> None:
        self.now = ns

    def advance(self, ns: int) -> None:
        self.now += ns
