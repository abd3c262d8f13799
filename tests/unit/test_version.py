"""Test basic package functionality."""

import f5xc_auth


def test_version():
    """Test that package version is defined."""
    assert hasattr(f5xc_auth, "__version__")
    assert f5xc_auth.__version__ == "0.1.0"


def test_public_api_exports():
    """The composition-root types are importable from the package root."""
    for name in ("APIClient", "CredentialResolver", "ProfileStore", "Profile", "AuthMode"):
        assert name in f5xc_auth.__all__
        assert hasattr(f5xc_auth, name)
