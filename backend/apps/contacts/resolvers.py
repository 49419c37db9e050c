# apps/contacts/resolvers.py

"""DNS Resolver collaborator: does a mail domain accept mail?"""

import logging
from typing import Protocol

import dns.exception
import dns.resolver

from apps.common.exceptions import TransientError

logger = logging.getLogger(__name__)


class ResolverError(TransientError):
    """The lookup itself failed (timeout, no reachable nameserver)."""


class DnsResolver(Protocol):
    def has_mx(self, domain: str) -> bool:
        ...


class DnsPythonResolver:
    """
    MX lookup with dnspython. A missing domain or an empty answer means no
    mail exchanger; timeouts and nameserver failures raise ResolverError so
    the caller can retry.
    """

    def __init__(self, lifetime: float = 10.0):
        self.lifetime = lifetime

    def has_mx(self, domain: str) -> bool:
        try:
            answers = dns.resolver.resolve(domain, "MX", lifetime=self.lifetime, raise_on_no_answer=False)
        except dns.resolver.NXDOMAIN:
            return False
        except (dns.resolver.LifetimeTimeout, dns.resolver.NoNameservers) as e:
            raise ResolverError(f"DNS lookup failed for {domain}: {e.__class__.__name__}") from e
        except dns.exception.DNSException as e:
            raise ResolverError(f"DNS lookup failed for {domain}: {e}") from e

        if answers.rrset is None:
            return False
        hosts = [str(rdata.exchange).rstrip(".") for rdata in answers]
        # A null MX ("0 .") means the domain explicitly accepts no mail
        return any(hosts)
