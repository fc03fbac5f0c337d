# apps/analytics/circuit_breaker.py
import hashlib
import time
from enum import Enum
from functools import wraps
from django.core.cache import cache
from django.conf import settings
from django.db import DatabaseError
import logging

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitOpenError(Exception):
    """Raised when a call fails and no last known good result is cached."""

    def __init__(self, func_name):
        self.func_name = func_name
        super().__init__(f"{func_name} is unavailable and has no cached result")


class CircuitBreaker:
    """Fail fast on a struggling store and serve the last known good result.

    Every successful call caches its result under a key derived from the
    call arguments; failures (and calls while the circuit is open) return
    that cached result instead, or raise ``CircuitOpenError``.
    """

    def __init__(self, failure_threshold=5, recovery_timeout=60, expected_exception=DatabaseError):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self.registered = []

    def _get_cache_key(self, func_name):
        return f"circuit_breaker:{func_name}"

    def _fallback_key(self, func_name, args, kwargs):
        digest = hashlib.md5(repr((args, sorted(kwargs.items()))).encode('utf-8')).hexdigest()
        return f"fallback:{func_name}:{digest}"

    def _get_state(self, func_name):
        return cache.get(self._get_cache_key(func_name), {
            'state': CircuitState.CLOSED.value,
            'failure_count': 0,
            'last_failure_time': None
        })

    def _set_state(self, func_name, state_data):
        cache.set(self._get_cache_key(func_name), state_data, 300)

    def _should_attempt_reset(self, state_data):
        if state_data['state'] != CircuitState.OPEN.value:
            return False
        return time.time() - state_data['last_failure_time'] >= self.recovery_timeout

    def __call__(self, func):
        func_name = f"{func.__module__}.{func.__name__}"
        self.registered.append(func_name)

        @wraps(func)
        def wrapper(*args, **kwargs):
            state_data = self._get_state(func_name)

            # Circuit OPEN - fail fast
            if state_data['state'] == CircuitState.OPEN.value:
                if not self._should_attempt_reset(state_data):
                    logger.warning(f"Circuit breaker OPEN for {func_name}")
                    return self._fallback_response(func_name, args, kwargs)
                state_data['state'] = CircuitState.HALF_OPEN.value
                self._set_state(func_name, state_data)

            try:
                result = func(*args, **kwargs)
            except self.expected_exception as e:
                logger.error(f"Circuit breaker failure in {func_name}: {e}")
                return self._record_failure(func_name, state_data, args, kwargs)

            cache.set(self._fallback_key(func_name, args, kwargs), result, settings.ANALYTICS_FALLBACK_TTL)
            if state_data['state'] != CircuitState.CLOSED.value:
                self._reset_circuit(func_name)
                logger.info(f"Circuit breaker CLOSED for {func_name}")
            return result

        wrapper.circuit_name = func_name
        return wrapper

    def _record_failure(self, func_name, state_data, args, kwargs):
        state_data['failure_count'] += 1
        state_data['last_failure_time'] = time.time()

        if state_data['failure_count'] >= self.failure_threshold:
            state_data['state'] = CircuitState.OPEN.value
            logger.error(f"Circuit breaker OPENED for {func_name}")

        self._set_state(func_name, state_data)
        return self._fallback_response(func_name, args, kwargs)

    def _reset_circuit(self, func_name):
        self._set_state(func_name, {
            'state': CircuitState.CLOSED.value,
            'failure_count': 0,
            'last_failure_time': None
        })

    def _fallback_response(self, func_name, args, kwargs):
        cached_result = cache.get(self._fallback_key(func_name, args, kwargs))
        if cached_result is not None:
            logger.info(f"Returning cached fallback for {func_name}")
            return cached_result
        raise CircuitOpenError(func_name)

    def status(self):
        return [
            {'circuit': name, **self._get_state(name)}
            for name in self.registered
        ]
