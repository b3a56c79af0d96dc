import typing as t

UserID = t.NewType("UserID", int)
OrganizationID = t.NewType("OrganizationID", int)
MembershipID = t.NewType("MembershipID", int)
