from app import create_app
from extensions import db
from models import ROLES, User
from modules.teams.models import MaintenanceTeam

app = create_app()

def create_user(name, email, password, role, team_name=None):
    with app.app_context():
        # email must be unique
        existing_user = User.query.filter_by(email=email.lower()).first()
        if existing_user:
            print(f"⚠️  User '{email}' already exists with role '{existing_user.role}'.")
            return

        team = None
        if team_name:
            team = MaintenanceTeam.query.filter_by(name=team_name).first()
            if team is None:
                print(f"⚠️  Team '{team_name}' not found.")
                return

        user = User(name=name, email=email.lower(), role=role, team=team)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        print(f"✅ Created user: {email} (role: {role})")

if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Create a new GearGuard user.')
    parser.add_argument('name', help='Display name')
    parser.add_argument('email', help='Login email')
    parser.add_argument('password', help='Password')
    parser.add_argument('role', choices=ROLES, help='User role')
    parser.add_argument('--team', help='Maintenance team name')

    args = parser.parse_args()
    create_user(args.name, args.email, args.password, args.role, args.team)
