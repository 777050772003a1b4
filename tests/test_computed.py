"""Tests for computed cells and computed fields on models."""
import logging

import pytest

from reactivemodel import ComputedCell, ComputedOptions


class TestComputedCell:

    def test_memoized_until_token_changes(self):
        token = {'value': 0}
        calls = []

        def getter():
            calls.append(1)
            return len(calls)

        cell = ComputedCell(getter, token_provider=lambda: token['value'])

        assert cell.value == 1
        assert cell.value == 1
        assert len(calls) == 1

        token['value'] += 1
        assert cell.value == 2
        assert cell.computed is True

    def test_cache_disabled_recomputes_every_read(self):
        calls = []
        cell = ComputedCell(lambda: calls.append(1) or len(calls), cache=False)

        assert cell.value == 1
        assert cell.value == 2

    def test_invalidate(self):
        calls = []
        cell = ComputedCell(lambda: calls.append(1) or len(calls))

        cell.value
        cell.invalidate()
        assert cell.computed is False
        assert cell.value == 2

    def test_setter_and_read_only(self):
        written = []
        cell = ComputedCell(lambda: 0, setter=written.append)
        cell.value = 5
        assert written == [5]

        read_only = ComputedCell(lambda: 0)
        read_only.value = 5
        assert read_only.value == 0
        assert not read_only.has_setter

    def test_getter_error_propagates(self):
        def broken():
            raise RuntimeError("boom")

        cell = ComputedCell(broken)
        with pytest.raises(RuntimeError, match="boom"):
            cell.value
        assert cell.computed is False


class TestComputedOptions:

    def test_from_callable(self):
        def getter(model):
            return 1

        options = ComputedOptions.coerce(getter)
        assert options.get is getter
        assert options.set is None
        assert options.cache is True

    def test_from_mapping(self):
        options = ComputedOptions.coerce({'get': len, 'set': print, 'cache': False})
        assert options.get is len
        assert options.set is print
        assert options.cache is False

    def test_from_property(self):
        prop = property(lambda self: 1, lambda self, value: None)
        options = ComputedOptions.coerce(prop)
        assert options.get is prop.fget
        assert options.set is prop.fset

    @pytest.mark.parametrize('declaration', [42, {'set': print}, {'get': 'nope'}])
    def test_invalid_declaration(self, declaration):
        with pytest.raises(TypeError):
            ComputedOptions.coerce(declaration)


class TestModelComputed:

    def test_sum_follows_updates(self, sum_model):
        sum_model.computed('full', lambda self: self.a + self.b)

        sum_model.set_value('a', 2)
        sum_model.set_value('b', 3)

        assert sum_model.full == 5
        assert sum_model['full'] == 5

    def test_memoized_between_mutations(self, sum_model):
        calls = []

        def total(self):
            calls.append(1)
            return self.a + self.b

        sum_model.computed('total', total)
        assert sum_model.total == 0
        assert sum_model.total == 0
        assert len(calls) == 1

        sum_model.a = 4
        assert sum_model.total == 4
        assert len(calls) == 2

    def test_cache_false_recomputes(self, sum_model):
        calls = []
        sum_model.computed('total', {'get': lambda self: calls.append(1) or self.a, 'cache': False})

        sum_model.total
        sum_model.total
        assert len(calls) == 2

    def test_setter_writes_fields(self, sum_model):
        def get_pair(self):
            return f"{self.a},{self.b}"

        def set_pair(self, value):
            a, b = value.split(',')
            self.set_value('a', int(a)).set_value('b', int(b))

        sum_model.computed('pair', {'get': get_pair, 'set': set_pair})
        sum_model.pair = '7,8'

        assert sum_model.a == 7
        assert sum_model.b == 8
        assert sum_model.pair == '7,8'

    def test_getter_only_ignores_writes(self, sum_model):
        sum_model.computed('full', lambda self: self.a + self.b)
        sum_model.full = 100
        assert sum_model.full == 0

    def test_collision_is_rejected(self, sum_model, caplog):
        with caplog.at_level(logging.ERROR, logger='reactivemodel'):
            result = sum_model.computed('a', lambda self: 99)

        assert result is sum_model
        assert sum_model.a == 0
        assert "compute key (a) has existed" in caplog.text

    def test_reserved_name_is_rejected(self, sum_model, caplog):
        with caplog.at_level(logging.ERROR, logger='reactivemodel'):
            sum_model.computed('watch', lambda self: 1)

        assert callable(sum_model.watch)
        assert "is reserved" in caplog.text

    def test_getter_error_propagates_from_attribute(self, sum_model):
        def broken(self):
            raise ValueError("bad computed")

        sum_model.computed('broken', broken)
        with pytest.raises(ValueError, match="bad computed"):
            sum_model.broken

    def test_computed_not_shared_between_instances(self, sum_model):
        other = type(sum_model)()
        sum_model.computed('full', lambda self: self.a + self.b)

        with pytest.raises(AttributeError):
            other.full

    def test_list_dependency_stays_current(self, profile_model):
        profile_model.computed('size', lambda self: len(self.tags))
        assert profile_model.size == 1

        profile_model.tags.append('b')
        assert profile_model.size == len(profile_model.tags) == 1

        profile_model.set_value('tags', ['a', 'b'])
        assert profile_model.size == 2

    def test_nested_list_dependency_stays_current(self, profile_model):
        profile_model.profile.langs = ['fr']
        profile_model.computed('lang_count', lambda self: len(self.profile.langs))
        assert profile_model.lang_count == 1

        profile_model.profile.langs.append('en')
        assert profile_model.lang_count == len(profile_model.profile.langs) == 1

        profile_model.profile.langs = ['fr', 'en']
        assert profile_model.lang_count == 2
