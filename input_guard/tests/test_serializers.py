"""
Tests for DRF fields and serializers.
"""

from datetime import date, timedelta

from django.test import SimpleTestCase
from rest_framework import serializers
from rest_framework.exceptions import ValidationError

from input_guard.exceptions import UnknownValidationKind
from input_guard.serializers import (
    NumericField,
    PhoneNumberField,
    RegistrationSerializer,
    SanitizedCharField,
    SanitizingSerializerMixin,
    SecureDateField,
    SecureEmailField,
    SecureTextField,
    SecureURLField,
    StrongPasswordField,
    UsernameField,
    ValidatedField,
)


class SanitizedCharFieldTests(SimpleTestCase):
    """Tests for SanitizedCharField."""

    def test_sanitize_html(self):
        """HTML should be escaped by default."""
        field = SanitizedCharField()
        value = field.run_validation('<script>alert("XSS")</script>Hello')
        self.assertNotIn('<script>', value)
        self.assertIn('&lt;script&gt;', value)

    def test_context_options(self):
        field = SanitizedCharField(sanitize_options={'allow_tags': True})
        self.assertEqual(field.run_validation('<b>Hi</b>'), '<b>Hi</b>')

    def test_search_query_context(self):
        field = SanitizedCharField(context='search-query')
        self.assertEqual(field.run_validation(' "django" <tips> '), 'django tips')

    def test_valid_input(self):
        """Valid input should pass."""
        field = SanitizedCharField()
        self.assertEqual(field.run_validation('Normal text content'), 'Normal text content')


class UsernameFieldTests(SimpleTestCase):
    """Tests for UsernameField."""

    def test_sanitize_username(self):
        field = UsernameField()
        self.assertEqual(field.run_validation('  John_Doe!  '), 'john_doe')

    def test_too_short_after_sanitizing(self):
        field = UsernameField()

        with self.assertRaises(ValidationError):
            field.run_validation('a!')


class SecureEmailFieldTests(SimpleTestCase):
    """Tests for SecureEmailField."""

    def test_valid_email(self):
        """Email should be cleaned."""
        field = SecureEmailField()
        self.assertEqual(field.run_validation('  User@Example.COM  '), 'user@example.com')

    def test_invalid_email(self):
        """Every engine error is reported."""
        field = SecureEmailField()

        with self.assertRaises(ValidationError) as cm:
            field.run_validation('test..test@domain')

        self.assertEqual(cm.exception.detail, [
            'Invalid email format',
            'Email cannot contain consecutive dots',
        ])


class PhoneNumberFieldTests(SimpleTestCase):
    """Tests for PhoneNumberField."""

    def test_formatted(self):
        field = PhoneNumberField()
        test_cases = [
            ('555-123-4567', '(555) 123-4567'),
            ('1 555 123 4567', '+1 (555) 123-4567'),
        ]

        for input_phone, expected in test_cases:
            with self.subTest(input_phone=input_phone):
                self.assertEqual(field.run_validation(input_phone), expected)

    def test_international(self):
        field = PhoneNumberField(options={'mode': 'international'})
        self.assertEqual(field.run_validation('44 20 7946 0958'), '+442079460958')

    def test_invalid(self):
        field = PhoneNumberField()

        with self.assertRaises(ValidationError):
            field.run_validation('12345')

    def test_not_required(self):
        field = PhoneNumberField(required=False)
        self.assertEqual(field.run_validation(''), '')


class StrongPasswordFieldTests(SimpleTestCase):
    """Tests for StrongPasswordField."""

    def test_write_only(self):
        field = StrongPasswordField()
        self.assertTrue(field.write_only)
        self.assertEqual(field.style, {'input_type': 'password'})

    def test_password_returned_unchanged(self):
        field = StrongPasswordField()
        self.assertEqual(field.run_validation('MyStr0ng!Pass'), 'MyStr0ng!Pass')

    def test_weak_password(self):
        field = StrongPasswordField()

        with self.assertRaises(ValidationError) as cm:
            field.run_validation('password123')

        self.assertIn('Password is too common', cm.exception.detail)


class SecureURLFieldTests(SimpleTestCase):
    """Tests for SecureURLField."""

    def test_urls(self):
        field = SecureURLField()
        self.assertEqual(
            field.run_validation('  https://example.com/page  '),
            'https://example.com/page',
        )

        with self.assertRaises(ValidationError):
            field.run_validation('javascript:alert(1)')


class SecureTextFieldTests(SimpleTestCase):
    """Tests for SecureTextField."""

    def test_text(self):
        field = SecureTextField(options={'min_length': 2, 'max_length': 20})
        self.assertEqual(field.run_validation('  Hello   World  '), 'Hello World')

        with self.assertRaises(ValidationError) as cm:
            field.run_validation('x')
        self.assertEqual(cm.exception.detail, ['Must be at least 2 characters long'])


class NumericFieldTests(SimpleTestCase):
    """Tests for NumericField."""

    def test_currency(self):
        field = NumericField(options={'type': 'currency', 'min': 0})
        self.assertEqual(field.run_validation('$1,234.56'), 1234.56)

    def test_integer(self):
        field = NumericField(options={'min': 18, 'max': 120})
        self.assertEqual(field.run_validation('42'), 42)

        with self.assertRaises(ValidationError):
            field.run_validation('17')


class SecureDateFieldTests(SimpleTestCase):
    """Tests for SecureDateField."""

    def test_returns_date(self):
        field = SecureDateField()
        self.assertEqual(field.run_validation('2023-12-25'), date(2023, 12, 25))
        self.assertEqual(field.run_validation('12/25/2023'), date(2023, 12, 25))

    def test_callable_bound_evaluated_per_call(self):
        field = SecureDateField(options={'max_date': date.today})
        field.run_validation(date.today().isoformat())

        with self.assertRaises(ValidationError):
            field.run_validation((date.today() + timedelta(days=1)).isoformat())

    def test_to_representation(self):
        field = SecureDateField()
        self.assertEqual(field.to_representation(date(2023, 12, 25)), '2023-12-25')
        self.assertIsNone(field.to_representation(None))


class ValidatedFieldTests(SimpleTestCase):
    """Tests for ValidatedField."""

    def test_kind_argument(self):
        field = ValidatedField('email')
        self.assertEqual(field.run_validation('A@B.CO'), 'a@b.co')

    def test_unknown_kind(self):
        with self.assertRaises(UnknownValidationKind):
            ValidatedField('zipcode')

    def test_drf_required_false_relaxes_engine(self):
        field = SecureEmailField(required=False)
        self.assertFalse(field.options['required'])
        self.assertEqual(field.run_validation(''), '')

    def test_missing_value_uses_drf_message(self):
        class ContactSerializer(serializers.Serializer):
            email = SecureEmailField()

        serializer = ContactSerializer(data={})
        self.assertFalse(serializer.is_valid())
        self.assertEqual(serializer.errors['email'][0].code, 'required')


class SanitizingSerializerMixinTests(SimpleTestCase):
    """Tests for SanitizingSerializerMixin."""

    def test_sanitize_contexts(self):
        class CommentSerializer(SanitizingSerializerMixin, serializers.Serializer):
            sanitize_contexts = {'body': 'html-content', 'homepage': 'url'}

            body = serializers.CharField()
            homepage = serializers.CharField()
            author = serializers.CharField()

        serializer = CommentSerializer(data={
            'body': '<script>x</script>',
            'homepage': 'javascript:alert(1)',
            'author': '<i>Ann</i>',
        })
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['body'], '&lt;script&gt;x&lt;&#x2F;script&gt;')
        self.assertEqual(serializer.validated_data['homepage'], '')
        self.assertEqual(serializer.validated_data['author'], '<i>Ann</i>')


class RegistrationSerializerTests(SimpleTestCase):
    """Tests for RegistrationSerializer."""

    def get_data(self, **overrides):
        data = {
            'username': 'JohnDoe',
            'email': '  John@Example.com ',
            'password': 'MyStr0ng!Pass',
            'password_confirm': 'MyStr0ng!Pass',
            'first_name': 'John',
            'last_name': 'Doe',
            'phone': '555-123-4567',
            'birth_date': '1990-05-15',
            'website': 'https://example.com',
            'bio': 'Hello <b>world</b>\r\n\r\n\r\nBye',
        }
        data.update(overrides)
        return data

    def test_valid_registration(self):
        serializer = RegistrationSerializer(data=self.get_data())
        self.assertTrue(serializer.is_valid(), serializer.errors)

        data = serializer.validated_data
        self.assertEqual(data['username'], 'johndoe')
        self.assertEqual(data['email'], 'john@example.com')
        self.assertEqual(data['password'], 'MyStr0ng!Pass')
        self.assertEqual(data['phone'], '(555) 123-4567')
        self.assertEqual(data['birth_date'], date(1990, 5, 15))
        self.assertEqual(data['website'], 'https://example.com')
        self.assertEqual(data['bio'], 'Hello &lt;b&gt;world&lt;&#x2F;b&gt;\n\nBye')
        self.assertNotIn('password_confirm', data)

    def test_optional_fields(self):
        data = self.get_data()
        for name in ('phone', 'website', 'bio'):
            data.pop(name)

        serializer = RegistrationSerializer(data=data)
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertNotIn('phone', serializer.validated_data)

    def test_unsafe_website_dropped(self):
        serializer = RegistrationSerializer(data=self.get_data(website='javascript:alert(1)'))
        self.assertTrue(serializer.is_valid(), serializer.errors)
        self.assertEqual(serializer.validated_data['website'], '')

    def test_password_mismatch(self):
        serializer = RegistrationSerializer(data=self.get_data(password_confirm='Other!Pass9'))
        self.assertFalse(serializer.is_valid())
        self.assertEqual(serializer.errors['password_confirm'], ['Passwords do not match.'])

    def test_future_birth_date(self):
        tomorrow = (date.today() + timedelta(days=1)).isoformat()
        serializer = RegistrationSerializer(data=self.get_data(birth_date=tomorrow))
        self.assertFalse(serializer.is_valid())
        self.assertTrue(
            str(serializer.errors['birth_date'][0]).startswith('Date must be on or before')
        )

    def test_field_errors_collected(self):
        serializer = RegistrationSerializer(data=self.get_data(
            email='bad', password='weak', first_name='J', phone='123',
        ))
        self.assertFalse(serializer.is_valid())
        self.assertEqual(
            set(serializer.errors),
            {'email', 'password', 'first_name', 'phone'},
        )

    def test_password_not_serialized(self):
        serializer = RegistrationSerializer(data=self.get_data())
        serializer.is_valid()
        self.assertNotIn('password', serializer.data)
        self.assertNotIn('password_confirm', serializer.data)
