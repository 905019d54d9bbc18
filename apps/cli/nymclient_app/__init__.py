"""Command-line front end for the nym-client installer."""
