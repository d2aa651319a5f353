import mcodec.core as core
import mcodec.engine as engine
import mcodec.io as io


def test_package_exports():
    assert core.decode_to_canonical is not None
    assert core.unit_json() == {"__unit__": None}
    assert engine.UNIT is engine.values.UNIT
    assert issubclass(io.FramingError, io.ServiceError)
    for name in core.__all__ + engine.__all__ + io.__all__:
        assert name
    assert set(io.__all__) <= set(dir(io))
