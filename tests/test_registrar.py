"""Tests for ObservationRegistrar."""

import copy
import pickle

from statescope import ObservationRegistrar, RegistrarPhase, autorun, transaction


def _observe(registrar, field, log, label=None):
    """autorun that reads field and logs each run."""

    def fn():
        registrar.access(field)
        log.append(label or field)

    return autorun(fn)


class TestAccess:
    def test_access_outside_tracking_is_noop(self):
        r = ObservationRegistrar()
        r.access("x")
        assert r.phase is RegistrarPhase.IDLE
        assert r.observed_fields() == []

    def test_access_inside_tracking_records(self):
        r = ObservationRegistrar()
        _observe(r, "x", [])
        assert r.phase is RegistrarPhase.TRACKING
        assert [name for name, _ in r.observed_fields()] == ["x"]

    def test_getter_is_remembered(self):
        r = ObservationRegistrar()
        getter = lambda s: s

        autorun(lambda: r.access("x", getter))
        assert r.observed_fields() == [("x", getter)]

    def test_getters_kept_per_observer(self):
        r = ObservationRegistrar()
        first = lambda s: s[0]
        second = lambda s: s[1]

        a = autorun(lambda: r.access("x", first))
        autorun(lambda: r.access("x", second))
        assert r.observed_fields() == [("x", first), ("x", second)]
        a.dispose()
        assert r.observed_fields() == [("x", second)]

    def test_dispose_releases_fields(self):
        r = ObservationRegistrar()
        obs = _observe(r, "x", [])
        obs.dispose()
        assert r.phase is RegistrarPhase.IDLE
        assert r.observed_fields() == []


class TestMutation:
    def test_notifies_observers_of_field(self):
        r = ObservationRegistrar()
        log = []
        _observe(r, "x", log)
        r.with_mutation("x", lambda: None)
        assert log == ["x", "x"]

    def test_other_fields_untouched(self):
        r = ObservationRegistrar()
        log = []
        _observe(r, "x", log)
        r.with_mutation("y", lambda: None)
        assert log == ["x"]

    def test_unobserved_field_is_silent(self):
        r = ObservationRegistrar()
        r.with_mutation("never-read", lambda: None)
        assert r.phase is RegistrarPhase.IDLE

    def test_returns_body_result(self):
        r = ObservationRegistrar()
        assert r.with_mutation("x", lambda: 42) == 42

    def test_phase_while_mutating(self):
        r = ObservationRegistrar()
        phases = []
        r.with_mutation("x", lambda: phases.append(r.phase))
        assert phases == [RegistrarPhase.MUTATING]
        assert r.phase is RegistrarPhase.IDLE

    def test_nested_brackets_coalesce(self):
        r = ObservationRegistrar()
        log = []
        _observe(r, "x", log)
        with r.mutation("x"):
            with r.mutation("x"):
                pass
            assert log == ["x"]  # inner close does not notify
        assert log == ["x", "x"]

    def test_fields_notify_as_brackets_close(self):
        r = ObservationRegistrar()
        log = []
        _observe(r, "x", log)
        _observe(r, "y", log)
        log.clear()
        with r.mutation("x"):
            with r.mutation("y"):
                pass
        assert log == ["y", "x"]

    def test_notifies_when_body_raises(self):
        r = ObservationRegistrar()
        log = []
        _observe(r, "x", log)
        try:
            with r.mutation("x"):
                raise ValueError("boom")
        except ValueError:
            pass
        assert log == ["x", "x"]

    def test_batched_observer_runs_once(self):
        r = ObservationRegistrar()
        log = []

        def fn():
            r.access("x")
            r.access("y")
            log.append("run")

        autorun(fn)
        with transaction():
            r.with_mutation("x", lambda: None)
            r.with_mutation("y", lambda: None)
        assert log == ["run", "run"]

    def test_batched_order_follows_mutation_order(self):
        r = ObservationRegistrar()
        log = []
        _observe(r, "x", log)
        _observe(r, "y", log)
        log.clear()
        with transaction():
            r.with_mutation("y", lambda: None)
            r.with_mutation("x", lambda: None)
        assert log == ["y", "x"]


class TestIdentity:
    def test_each_registrar_has_own_id(self):
        assert ObservationRegistrar().id != ObservationRegistrar().id

    def test_equality_by_id(self):
        r = ObservationRegistrar()
        assert r == r
        assert r != ObservationRegistrar()

    def test_pickle_yields_fresh_registrar(self):
        r = ObservationRegistrar()
        _observe(r, "x", [])
        restored = pickle.loads(pickle.dumps(r))
        assert restored.id != r.id
        assert restored.phase is RegistrarPhase.IDLE

    def test_copy_yields_fresh_registrar(self):
        r = ObservationRegistrar()
        assert copy.copy(r).id != r.id
        assert copy.deepcopy(r).id != r.id
