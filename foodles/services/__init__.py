"""
                        Services Module

Contains all business logic services with the hybrid architecture pattern.
Each external provider has Mock (development) and Real (production)
implementations.

Services:
    - payment: Razorpay signature verification and payment lookup
    - notifications: SendGrid email, Twilio missed calls/SMS, channels
    - orders: order notification fan-out and its status store
    - restaurants: open/closed status cache, change monitor, broadcaster
"""
