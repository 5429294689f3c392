from core import exceptions as core_exc


def test_invalid_state_transition_error_includes_states():
    err = core_exc.InvalidStateTransitionError(current_state="CANCELLED", target_state="RECEIVED")
    assert "CANCELLED" in str(err)
    assert err.extra["current_state"] == "CANCELLED"
    assert err.extra["target_state"] == "RECEIVED"
    assert isinstance(err, core_exc.StockPipelineError)


def test_invalid_state_transition_error_default_message():
    err = core_exc.InvalidStateTransitionError()
    assert err.detail == core_exc.InvalidStateTransitionError.default_detail


def test_missing_reference_error_builds_detail():
    err = core_exc.MissingReferenceError("Product", 42)
    assert err.detail == "Product 42 no existe."
    assert err.extra == {"model": "Product", "pk": "42"}


def test_stock_pipeline_error_custom_detail():
    err = core_exc.StockPipelineError("fallo", extra={"batch": 3})
    assert str(err) == "fallo"
    assert err.extra["batch"] == 3
