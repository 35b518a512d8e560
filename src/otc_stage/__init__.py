"""OTC Stage: email one-time code issuance and verification."""
