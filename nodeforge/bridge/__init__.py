"""Bridge layer between nodeforge and the outside world.

Every collaborator here is fallible and optional.  Failures are logged and
turned into ``None`` so the launch can proceed with fewer facts.

Modules
-------
discovery
    Local interface addresses (psutil) and the single public-address query.
echo
    ``EchoService`` backends: ``dig`` against Google's DNS echo, or an
    HTTP plain-text echo via httpx.
upnp
    ``UpnpNegotiator`` wraps the external negotiator binary that asks the
    gateway for a port mapping.
peer_directory
    ``HttpPeerDirectory`` resolves a network origin to its P2P peer id;
    ``download_bootstrap`` fetches an origin's bootstrap artifact.
"""
