"""Tests for coproducts and comultiplication.

These tests verify:
1. Literal coproducts and comultiplications of integer words
2. Bilinearity and wedge antisymmetry of the normal flavor
3. Iterated and Hopf flavors, compositions with more than two parts
4. Contract violations raised once per call
"""

import random
from concurrent.futures import ThreadPoolExecutor
from typing import override

import pytest

from coalgebrax.errors import ContractViolation
from coalgebrax.hopf_algebras.coalgebra import (
    CoproductFlavor,
    coexpr_type_for,
    comultiply,
    coproduct,
    coproduct_weights,
    filter_coexpr_predicate,
    has_coexpr_type,
    icoproduct,
    ncoproduct,
    register_coexpr_type,
)
from coalgebrax.letters.gamma import G, GammaExpr
from coalgebrax.letters.simple_vector import (
    CoSV,
    SV,
    SimpleVectorCoExpr,
    SimpleVectorExpr,
    SimpleVectorICoExpr,
)
from coalgebrax.linear.linear import Linear
from coalgebrax.linear.linear_types import CoExprParam, OrderingPolicy, WordParam
from coalgebrax.tensor_ops import shuffle_product_expr
from tests.conftest import random_simple_vector_expr


class _HopfWordParam(WordParam[int]):
    @override
    def letter_to_code(self, letter: int) -> int:
        return letter

    @override
    def code_to_letter(self, code: int) -> int:
        return code


class _HopfWordExpr(Linear):
    __slots__ = ()
    param = _HopfWordParam()


class _HopfWordCoExpr(Linear):
    __slots__ = ()
    param = CoExprParam(
        _HopfWordExpr.param,
        2,
        lie_algebra=False,
        iterated=False,
        ordering=OrderingPolicy.LEXICOGRAPHIC,
    )


register_coexpr_type(_HopfWordExpr, CoproductFlavor.NORMAL, _HopfWordCoExpr)


def _hw(*word: int) -> _HopfWordExpr:
    return _HopfWordExpr.single(word)


def test_coproduct_of_two_expressions() -> None:
    result = coproduct(SV([1]) - SV([2]), SV([3]) + 3 * SV([4]))
    expected = (
        +CoSV([[1], [3]])
        + 3 * CoSV([[1], [4]])
        - CoSV([[2], [3]])
        - 3 * CoSV([[2], [4]])
    )
    assert result == expected


def test_comultiply_form_1_1() -> None:
    assert comultiply(2 * SV([1, 2]), (1, 1)) == 2 * CoSV([[1], [2]])


def test_comultiply_form_2_2() -> None:
    result = comultiply(SV([1, 3, 2, 4]) + SV([4, 3, 2, 1]), (2, 2))
    assert result == CoSV([[1, 3], [2, 4]]) - CoSV([[1, 2], [3, 4]])


def test_comultiply_degenerate_term_vanishes() -> None:
    assert comultiply(SV([1, 1, 2, 3]), (2, 2)) == SimpleVectorCoExpr()


def test_comultiply_of_zero_is_zero() -> None:
    result = comultiply(SimpleVectorExpr(), (2, 2))
    assert result.is_zero()
    assert type(result) is SimpleVectorCoExpr


@pytest.mark.parametrize("form", [(1, 2), (2, 3), (0, 4), (4,), (-1, 5)])
def test_comultiply_rejects_bad_form(form: tuple[int, ...]) -> None:
    with pytest.raises(ContractViolation):
        comultiply(SV([1, 2, 3, 4]), form)


def test_comultiply_rejects_mixed_weights() -> None:
    param = SimpleVectorExpr.param
    expr = SimpleVectorExpr()
    expr.add_to_key(param.object_to_key((1, 2)), 1)
    expr.add_to_key(param.object_to_key((1, 2, 3)), 1)
    with pytest.raises(ContractViolation):
        comultiply(expr, (1, 1))
    with pytest.raises(ContractViolation):
        comultiply(expr, (1, 1), flavor=CoproductFlavor.ITERATED)


def test_coproduct_is_bilinear(rng: random.Random) -> None:
    a = random_simple_vector_expr(rng, alphabet_size=4, weight=2, num_terms=6)
    b = random_simple_vector_expr(rng, alphabet_size=4, weight=2, num_terms=6)
    c = random_simple_vector_expr(rng, alphabet_size=4, weight=1, num_terms=3)
    k = rng.choice([-3, -1, 2, 5])
    assert coproduct(a + k * b, c) == coproduct(a, c) + k * coproduct(b, c)
    assert coproduct(c, a + k * b) == coproduct(c, a) + k * coproduct(c, b)


def test_normal_coproduct_is_antisymmetric() -> None:
    assert ncoproduct(SV([2]), SV([1])) == -CoSV([[1], [2]])
    assert ncoproduct(SV([1]), SV([1])).is_zero()


def test_normal_coproduct_orders_parts_by_length_first() -> None:
    assert ncoproduct(SV([1, 2]), SV([3])) == -CoSV([[3], [1, 2]])


def test_iterated_coproduct_keeps_order() -> None:
    result = icoproduct(SV([2]), SV([1]))
    assert type(result) is SimpleVectorICoExpr
    assert result == SimpleVectorICoExpr.single(((2,), (1,)))


def test_coproduct_defaults_to_normal_flavor() -> None:
    assert type(coproduct(SV([1]), SV([2]))) is SimpleVectorCoExpr


def test_coproduct_of_different_algebras_raises() -> None:
    with pytest.raises(ContractViolation):
        coproduct(SV([1]), G([1, 2]))
    with pytest.raises(ContractViolation):
        coproduct(SV([1]))


def test_coproduct_dimension_mismatch_raises() -> None:
    with pytest.raises(ContractViolation):
        ncoproduct(G([1, 2]), G([1, 2, 3]))


def test_comultiply_normal_ignores_form_order() -> None:
    expr = SV([1, 2, 3])
    assert comultiply(expr, (1, 2)) == comultiply(expr, (2, 1))


def test_comultiply_iterated_projects_blocks() -> None:
    # 321 reduces to 123 before it is cut.
    result = comultiply(SV([3, 2, 1]), (1, 2), flavor=CoproductFlavor.ITERATED)
    assert result == SimpleVectorICoExpr.single(((1,), (2, 3)))
    assert result == comultiply(SV([1, 2, 3]), (1, 2), flavor=CoproductFlavor.ITERATED)
    result = comultiply(SV([1, 2, 3]), (2, 1), flavor=CoproductFlavor.ITERATED)
    assert result == SimpleVectorICoExpr.single(((1, 2), (3,)))


def test_comultiply_iterated_kills_shuffle_products() -> None:
    result = comultiply(SV([1, 2]) + SV([2, 1]), (1, 1), flavor=CoproductFlavor.ITERATED)
    assert result.is_zero()
    assert type(result) is SimpleVectorICoExpr
    shuffle = shuffle_product_expr([SV([1]), SV([2, 3])])
    assert comultiply(shuffle, (1, 2), flavor=CoproductFlavor.ITERATED).is_zero()
    assert comultiply(shuffle, (2, 1), flavor=CoproductFlavor.ITERATED).is_zero()


def test_comultiply_three_parts() -> None:
    result = comultiply(SV([1, 2, 3]), (1, 1, 1), flavor=CoproductFlavor.ITERATED)
    assert result.param.num_parts == 3
    assert result == type(result).single(((1,), (2,), (3,)))
    assert type(result) is coexpr_type_for(SimpleVectorExpr, CoproductFlavor.ITERATED, 3)


def test_comultiply_normal_three_parts_is_wedged() -> None:
    assert comultiply(SV([1, 2, 3]), (1, 1, 1)) == CoSV([[1], [2], [3]])
    assert comultiply(SV([1, 3, 2]), (1, 1, 1)) == -CoSV([[1], [2], [3]])
    # 321 reduces to 123 in the Lyndon basis.
    assert comultiply(SV([3, 2, 1]), (1, 1, 1)) == CoSV([[1], [2], [3]])


def test_hopf_comultiply_sums_all_orderings() -> None:
    result = comultiply(_hw(1, 2, 3), (1, 2))
    expected = _HopfWordCoExpr.single(((1,), (2, 3))) + _HopfWordCoExpr.single(((1, 2), (3,)))
    assert result == expected


def test_hopf_coproduct_has_no_signs() -> None:
    assert coproduct(_hw(2), _hw(1)) == _HopfWordCoExpr.single(((2,), (1,)))
    assert coproduct(_hw(1), _hw(1)) == _HopfWordCoExpr.single(((1,), (1,)))


def test_missing_flavor_raises() -> None:
    with pytest.raises(ContractViolation):
        coexpr_type_for(_HopfWordExpr, CoproductFlavor.GLUED, 2)


def test_register_rejects_foreign_coexpr() -> None:
    with pytest.raises(ContractViolation):
        register_coexpr_type(GammaExpr, CoproductFlavor.NORMAL, SimpleVectorCoExpr)


def test_derived_types_are_cached() -> None:
    first = coexpr_type_for(SimpleVectorExpr, CoproductFlavor.NORMAL, 4)
    second = coexpr_type_for(SimpleVectorExpr, CoproductFlavor.NORMAL, 4)
    assert first is second
    assert first is not SimpleVectorCoExpr
    assert first.param.num_parts == 4


def test_registry_lookups_during_concurrent_derivation() -> None:
    def _derive(num_parts: int) -> type[Linear]:
        return coexpr_type_for(GammaExpr, CoproductFlavor.ITERATED, num_parts)

    def _lookup(_: int) -> bool:
        return has_coexpr_type(GammaExpr, CoproductFlavor.NORMAL)

    with ThreadPoolExecutor(max_workers=8) as ex:
        derived = [ex.submit(_derive, n) for n in range(5, 45)]
        lookups = [ex.submit(_lookup, n) for n in range(200)]
        types = [fut.result() for fut in derived]
        assert all(fut.result() for fut in lookups)
    assert [t.param.num_parts for t in types] == list(range(5, 45))
    assert has_coexpr_type(GammaExpr, CoproductFlavor.GLUED)


def test_coproduct_weights() -> None:
    result = comultiply(SV([1, 2, 3, 4]), (1, 3))
    weights = coproduct_weights(result)
    assert set(weights) == {(1, 3)}
    assert sum(weights.values()) == len(result)


def test_filter_rejects_bad_slot() -> None:
    coexpr = CoSV([[1], [2]])
    with pytest.raises(ContractViolation):
        filter_coexpr_predicate(coexpr, 2, lambda part: True)
    with pytest.raises(ContractViolation):
        filter_coexpr_predicate(SV([1]), 0, lambda part: True)


def test_filter_on_integer_words() -> None:
    coexpr = CoSV([[1], [2, 3]]) - CoSV([[2], [1, 3]])
    assert filter_coexpr_predicate(coexpr, 0, lambda part: part == (1,)) == CoSV([[1], [2, 3]])
    assert filter_coexpr_predicate(coexpr, 1, lambda part: 2 in part) == CoSV([[1], [2, 3]])
