import pytest

from core.domain.errors import FlowValidationError, GeocodingError, MalformedOutputError
from core.domain.models import PhotoAnalysis, VerificationResult, VerificationStage, VerificationStatus
from core.services import VerificationHooks, verify_artisan_identity
from core.services.verification import PHOTO_ANALYSIS_FALLBACK

S = VerificationStage


def _hooks():
    seen: list[VerificationStage] = []
    traces = []
    return seen, traces, VerificationHooks(stage=seen.append, finished=traces.append)


@pytest.mark.parametrize(
    ("declared", "resolved", "decision", "status"),
    [
        ("New Delhi", "Gurgaon", {"status": "verified", "resolvedCity": "Gurgaon"}, VerificationStatus.VERIFIED),
        (
            "Mumbai",
            "Pune",
            {"status": "flagged", "resolvedCity": "Pune", "mismatchReason": "Neighbouring cities in Maharashtra."},
            VerificationStatus.FLAGGED,
        ),
        (
            "Bengaluru",
            "Kolkata",
            {"status": "mismatch", "resolvedCity": "Kolkata", "mismatchReason": "Different states."},
            VerificationStatus.MISMATCH,
        ),
    ],
)
@pytest.mark.asyncio
async def test_decision_is_returned_as_classified(
    scripted_model, static_geocoder, photo_uri, declared, resolved, decision, status
) -> None:
    model = scripted_model({"analysis": "A busy street market."}, decision)
    geocoder = static_geocoder(resolved)
    seen, traces, hooks = _hooks()

    result = await verify_artisan_identity(
        model,
        geocoder,
        photo=photo_uri,
        latitude=28.6,
        longitude=77.2,
        declared_city=declared,
        hooks=hooks,
    )

    assert result.status is status
    assert result.resolved_city == resolved
    if status is VerificationStatus.VERIFIED:
        assert result.mismatch_reason is None
    else:
        assert result.mismatch_reason
    assert seen == [S.RESOLVING_LOCATION, S.ANALYZING_PHOTO, S.COMPARING, S.from_status(status)]
    assert model.step_names == ["analyzeVerificationPhoto", "verifyArtisanIdentity"]
    assert model.calls[0][1] is PhotoAnalysis
    assert model.calls[1][1] is VerificationResult
    assert geocoder.calls == [(28.6, 77.2)]

    comparison_prompt = model.calls[1][0]
    assert f"`{declared}`" in comparison_prompt.text
    assert f"`{resolved}`" in comparison_prompt.text
    assert "A busy street market." in comparison_prompt.text

    (trace,) = traces
    assert trace.stages[0] is S.IDLE
    assert trace.geocoded_city == resolved
    assert trace.result == result
    assert trace.error is None


@pytest.mark.asyncio
async def test_geocoding_failure_stops_before_any_model_call(scripted_model, static_geocoder, photo_uri) -> None:
    model = scripted_model()
    geocoder = static_geocoder(GeocodingError("Failed to fetch city from coordinates.", step="reverseGeocode"))
    seen, traces, hooks = _hooks()

    with pytest.raises(GeocodingError):
        await verify_artisan_identity(
            model,
            geocoder,
            photo=photo_uri,
            latitude=12.97,
            longitude=77.59,
            declared_city="Bengaluru",
            hooks=hooks,
        )

    assert seen == [S.RESOLVING_LOCATION, S.ERROR]
    assert model.calls == []
    assert isinstance(traces[0].error, GeocodingError)


@pytest.mark.asyncio
async def test_empty_photo_analysis_uses_fallback(scripted_model, static_geocoder, photo_uri) -> None:
    model = scripted_model(
        {"analysis": ""},
        {"status": "verified", "resolvedCity": "Jaipur"},
    )

    result = await verify_artisan_identity(
        model,
        static_geocoder("Jaipur"),
        photo=photo_uri,
        latitude=26.91,
        longitude=75.79,
        declared_city="Jaipur",
    )

    assert result.status is VerificationStatus.VERIFIED
    assert PHOTO_ANALYSIS_FALLBACK in model.calls[1][0].text


@pytest.mark.asyncio
async def test_malformed_decision_moves_to_error(scripted_model, static_geocoder, photo_uri) -> None:
    model = scripted_model(
        {"analysis": "Temple gopuram in the background."},
        {"status": "flagged", "resolvedCity": "Madurai"},
    )
    seen, _, hooks = _hooks()

    with pytest.raises(MalformedOutputError) as excinfo:
        await verify_artisan_identity(
            model,
            static_geocoder("Madurai"),
            photo=photo_uri,
            latitude=9.93,
            longitude=78.12,
            declared_city="Chennai",
            hooks=hooks,
        )

    assert excinfo.value.missing == ["mismatchReason"]
    assert seen[-2:] == [S.COMPARING, S.ERROR]


@pytest.mark.asyncio
async def test_invalid_coordinates_make_no_calls(scripted_model, static_geocoder, photo_uri) -> None:
    model = scripted_model()
    geocoder = static_geocoder("Nowhere")
    seen, _, hooks = _hooks()

    with pytest.raises(FlowValidationError) as excinfo:
        await verify_artisan_identity(
            model,
            geocoder,
            photo=photo_uri,
            latitude=95.0,
            longitude=77.2,
            declared_city="Delhi",
            hooks=hooks,
        )

    assert excinfo.value.fields == ["latitude"]
    assert seen == [S.ERROR]
    assert model.calls == []
    assert geocoder.calls == []


@pytest.mark.asyncio
async def test_concurrent_mode_reports_stages_in_order(scripted_model, static_geocoder, photo_uri) -> None:
    model = scripted_model(
        {"analysis": "Houseboats on a lake."},
        {"status": "verified", "resolvedCity": "Srinagar"},
    )
    seen, _, hooks = _hooks()

    result = await verify_artisan_identity(
        model,
        static_geocoder("Srinagar"),
        photo=photo_uri,
        latitude=34.08,
        longitude=74.8,
        declared_city="Srinagar",
        hooks=hooks,
        concurrent=True,
    )

    assert result.status is VerificationStatus.VERIFIED
    assert seen == [S.RESOLVING_LOCATION, S.ANALYZING_PHOTO, S.COMPARING, S.VERIFIED]
    assert len(model.calls) == 2


@pytest.mark.asyncio
async def test_concurrent_mode_propagates_geocoding_failure(scripted_model, static_geocoder, photo_uri) -> None:
    model = scripted_model({"analysis": "A courtyard."})
    seen, _, hooks = _hooks()

    with pytest.raises(GeocodingError):
        await verify_artisan_identity(
            model,
            static_geocoder(GeocodingError("Failed to fetch city from coordinates.")),
            photo=photo_uri,
            latitude=22.57,
            longitude=88.36,
            declared_city="Kolkata",
            hooks=hooks,
            concurrent=True,
        )

    assert seen[-1] is S.ERROR
    assert model.step_names == ["analyzeVerificationPhoto"]
