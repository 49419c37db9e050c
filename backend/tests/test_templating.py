import pytest

from apps.outreach.models import EmailTemplate
from apps.outreach.templating import PlaceholderRenderer, build_context, render_text


class TestRenderText:
    def test_known_placeholders_are_substituted(self):
        text = "Hi {{contact_name}}, saw {{ domain }} runs on {{  platform }} with {{ page_count }} pages"
        context = {"contact_name": "Jane", "domain": "acme.test", "platform": "WordPress", "page_count": 12}
        assert render_text(text, context) == "Hi Jane, saw acme.test runs on WordPress with 12 pages"

    def test_unknown_and_empty_placeholders_stay_as_written(self):
        text = "Hi {{ contact_name }}, {{ discount_code }} for {{ domain }}"
        assert render_text(text, {"contact_name": "", "domain": "acme.test"}) == (
            "Hi {{ contact_name }}, {{ discount_code }} for acme.test"
        )

    def test_empty_text(self):
        assert render_text("", {"domain": "acme.test"}) == ""


@pytest.mark.django_db
class TestPlaceholderRenderer:
    def test_renders_every_part(self, qualified_site, make_contact, settings):
        settings.LEADMAILER_SENDER_NAME = "Sam"
        contact = make_contact(qualified_site, "jane@acme.test", name="Jane", role="Founder")
        template = EmailTemplate(
            name="Role",
            subject_template="{{ contact_role }} at {{ website_title }}",
            body_template="Hello {{ contact_name }} <{{ contact_email }}>\n{{ sender_name }}",
            preheader="{{ word_count }} words",
        )

        message = PlaceholderRenderer().render(template, build_context(qualified_site, contact))

        assert message.subject == "Founder at Acme Hosting"
        assert message.body == "Hello Jane <jane@acme.test>\nSam"
        assert message.preheader == "1500 words"

    def test_site_without_title_falls_back_to_domain(self, make_site, make_contact):
        site = make_site(domain="plain.test")
        context = build_context(site, make_contact(site, "info@plain.test"))
        assert context["website_title"] == "plain.test"
        assert context["website_url"] == "https://plain.test"
