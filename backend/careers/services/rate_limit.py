import time


class SubmissionRateLimiter:
    """Sliding-window cap on application submissions per client address."""

    def __init__(self, max_submissions: int, window_seconds: float):
        self.max_submissions = max_submissions
        self.window_seconds = window_seconds
        self._submissions: dict[str, list[float]] = {}  # address -> submission times

    def _cleanup_expired(self, now: float) -> None:
        cutoff = now - self.window_seconds
        recent = {key: [t for t in times if t > cutoff] for key, times in self._submissions.items()}
        self._submissions = {key: times for key, times in recent.items() if times}

    def hit(self, key: str, now: float | None = None) -> float:
        """Record a submission. Returns 0 if allowed, else seconds until the next one is."""
        now = time.time() if now is None else now
        self._cleanup_expired(now)
        times = self._submissions.setdefault(key, [])
        if len(times) >= self.max_submissions:
            return max(0.0, times[0] + self.window_seconds - now)
        times.append(now)
        return 0.0

    def reset(self) -> None:
        self._submissions.clear()
