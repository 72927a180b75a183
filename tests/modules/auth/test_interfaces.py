from modules.auth.interfaces import IAuthGate, IIdentityVerifier
from modules.auth.service import AuthGate
from modules.auth.verifier import JWKSTokenVerifier, SecretTokenVerifier


class TestAuthInterfaces:
    def test_gate_implements_interface(self):
        assert isinstance(AuthGate(None), IAuthGate)

    def test_verifiers_implement_interface(self):
        assert isinstance(SecretTokenVerifier("secret"), IIdentityVerifier)
        assert isinstance(JWKSTokenVerifier(None), IIdentityVerifier)

    def test_interface_methods_exist(self):
        for method in ["verify", "close"]:
            assert hasattr(IIdentityVerifier, method)
        assert hasattr(IAuthGate, "authenticate")
